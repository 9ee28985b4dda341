import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import Settings

logger = logging.getLogger(__name__)


class MailService:
    """通过 SMTP（STARTTLS）发送纯文本邮件；未配置 SMTP_HOST 时只记录日志"""

    def __init__(self, *, host: str, port: int, username: str, password: str, sender: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailService":
        return cls(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.EMAIL_USER,
            password=settings.EMAIL_PASS,
            sender=settings.EMAIL_FROM,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, body: str) -> bool:
        if not self.enabled:
            logger.info(f"SMTP not configured, skipping mail to {to}: {subject}")
            return False

        msg = MIMEMultipart()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain", "utf-8"))

        with smtplib.SMTP(self.host, self.port, timeout=30) as server:
            server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.sendmail(self.sender, [to], msg.as_string())
        logger.info(f"Mail sent to {to}: {subject}")
        return True
