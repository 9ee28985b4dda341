import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, ConflictError, PermissionDeniedError
from app.core.security import LocalTokenCodec, generate_otp, hash_password, otp_matches, verify_password
from app.crud.crud_user import user as crud_user
from app.db.base_class import utcnow
from app.models.user import OtpPurpose, User, UserRole
from app.schemas.auth import SignupRequest
from app.services.preference_service import PreferenceService

logger = logging.getLogger(__name__)

MailSender = Callable[[str, str, str], None]


class AuthService:
    """
    本地账号的注册、验证码校验、登录和密码重置。

    所有依赖（令牌编解码器、验证码有效期、邮件投递函数）在构造时显式传入。
    验证码校验失败不计数，也没有锁定策略。
    """

    def __init__(
        self,
        *,
        token_codec: LocalTokenCodec,
        send_mail: MailSender,
        preference_service: PreferenceService,
        bcrypt_rounds: int = 12,
        signup_otp_ttl: timedelta = timedelta(minutes=5),
        reset_otp_ttl: timedelta = timedelta(minutes=10),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.token_codec = token_codec
        self.send_mail = send_mail
        self.preference_service = preference_service
        self.bcrypt_rounds = bcrypt_rounds
        self.signup_otp_ttl = signup_otp_ttl
        self.reset_otp_ttl = reset_otp_ttl
        self.clock = clock

    # ===== Signup & verification =====

    def signup(self, db: Session, payload: SignupRequest) -> User:
        email = payload.email.strip().lower()
        if crud_user.get_by_email(db, email=email) is not None:
            raise ConflictError("Email already in use")

        otp = generate_otp()
        user = User(
            name=payload.name.strip(),
            email=email,
            password_hash=hash_password(payload.password, self.bcrypt_rounds),
            role=UserRole(payload.role),
            is_verified=False,
        )
        self._issue_otp(user, otp, OtpPurpose.SIGNUP)
        db.add(user)
        try:
            db.flush()
            # 偏好和用户记录在同一事务中提交
            self.preference_service.replace(db, user, payload.preferences, commit=False)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Email already in use") from e
        db.refresh(user)

        logger.info(f"Created account {user.id}, verification code sent")
        self.send_mail(email, "EduTok Email Verification", f"Your EduTok verification code is: {otp}")
        return user

    def verify_signup_otp(self, db: Session, email: str, otp: str) -> User:
        user = crud_user.get_by_email(db, email=email)
        if user is None or user.is_verified:
            raise BadRequestError("Invalid request")
        if not self._otp_valid(user, otp, OtpPurpose.SIGNUP):
            raise BadRequestError("Invalid or expired code")

        user.is_verified = True
        user.clear_otp()
        db.commit()
        logger.info(f"Account {user.id} verified")
        return user

    def resend_signup_otp(self, db: Session, email: str) -> None:
        user = crud_user.get_by_email(db, email=email)
        if user is None or user.is_verified:
            raise BadRequestError("Invalid request")
        otp = generate_otp()
        self._issue_otp(user, otp, OtpPurpose.SIGNUP)
        db.commit()
        self.send_mail(user.email, "EduTok Email Verification", f"Your EduTok verification code is: {otp}")

    # ===== Login =====

    def login(self, db: Session, email: str, password: str) -> Tuple[str, User]:
        user = crud_user.get_by_email(db, email=email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Login failed: bad credentials")
            raise BadRequestError("Invalid email or password")
        if not user.is_verified:
            raise PermissionDeniedError("Please verify your email before logging in")

        token = self.token_codec.issue(user_id=user.id, role=user.role.value, is_admin=user.is_admin)
        return token, user

    # ===== Password reset =====

    def forgot_password(self, db: Session, email: str) -> None:
        """对已存在的本地账号发出重置验证码；账号不存在时静默返回"""
        user = crud_user.get_by_email(db, email=email)
        if user is None or not user.password_hash:
            logger.info("Password reset requested for unknown account")
            return
        otp = generate_otp()
        self._issue_otp(user, otp, OtpPurpose.RESET)
        db.commit()
        self.send_mail(user.email, "EduTok Password Reset", f"Your EduTok password reset code is: {otp}")

    def reset_password(self, db: Session, email: str, otp: str, new_password: str) -> User:
        user = crud_user.get_by_email(db, email=email)
        if user is None or not self._otp_valid(user, otp, OtpPurpose.RESET):
            raise BadRequestError("Invalid or expired code")

        user.password_hash = hash_password(new_password, self.bcrypt_rounds)
        # 能收到验证码说明邮箱有效
        user.is_verified = True
        user.clear_otp()
        db.commit()
        logger.info(f"Password reset for account {user.id}")
        return user

    def change_password(self, db: Session, user: User, current_password: str, new_password: str) -> None:
        if not verify_password(current_password, user.password_hash):
            raise BadRequestError("Current password is incorrect")
        user.password_hash = hash_password(new_password, self.bcrypt_rounds)
        db.commit()

    # ===== helpers =====

    def _issue_otp(self, user: User, otp: str, purpose: OtpPurpose) -> None:
        ttl = self.signup_otp_ttl if purpose == OtpPurpose.SIGNUP else self.reset_otp_ttl
        user.otp_code = otp
        user.otp_purpose = purpose
        user.otp_expires_at = self.clock() + ttl

    def _otp_valid(self, user: User, otp: str, purpose: OtpPurpose) -> bool:
        expires_at: Optional[datetime] = user.otp_expires_at
        if user.otp_purpose != purpose or expires_at is None:
            return False
        if self.clock() > expires_at:
            return False
        return otp_matches(user.otp_code, otp)
