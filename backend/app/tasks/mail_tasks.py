import logging

from app.celery_app import celery_app
from app.core.config import settings
from app.services.mail_service import MailService

logger = logging.getLogger(__name__)


@celery_app.task(name='app.tasks.mail_tasks.send_email_task', bind=True, max_retries=0)
def send_email_task(self, to: str, subject: str, body: str) -> bool:
    """发送一封纯文本邮件（验证码、重置密码等）"""
    try:
        return MailService.from_settings(settings).send(to, subject, body)
    except Exception as e:
        logger.error(f"Mail Task: failed to send mail to {to}: {e}")
        raise


def dispatch_email(to: str, subject: str, body: str) -> None:
    """
    把邮件投递到 mail_queue

    调用方的事务已经提交，投递失败只记录日志，用户可通过重发验证码恢复
    """
    try:
        send_email_task.apply_async(args=[to, subject, body], queue='mail_queue')
    except Exception:
        logger.exception(f"Mail Task: failed to enqueue mail to {to}")
