from datetime import timedelta
from functools import lru_cache
from typing import Optional

import boto3
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.external_auth import ExternalTokenVerifier
from app.core.permissions import ensure_admin
from app.core.security import LocalTokenCodec
from app.db.database import get_db
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.identity_service import AuthContext, TokenAuthenticator, resolve_user
from app.services.preference_service import preference_service
from app.services.upload_service import UploadService
from app.tasks.mail_tasks import dispatch_email

bearer_scheme = HTTPBearer(auto_error=False)


# --- 令牌与身份 ---

@lru_cache
def get_token_codec() -> LocalTokenCodec:
    return LocalTokenCodec(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expires_minutes=settings.JWT_EXPIRES_MINUTES,
    )


@lru_cache
def get_external_verifier() -> Optional[ExternalTokenVerifier]:
    """
    获取外部身份提供方令牌校验器，未配置用户池时返回 None
    """
    if not settings.external_auth_enabled:
        return None
    return ExternalTokenVerifier(issuer=settings.cognito_issuer, client_id=settings.COGNITO_CLIENT_ID)


def get_token_authenticator() -> TokenAuthenticator:
    return TokenAuthenticator(get_token_codec(), get_external_verifier())


def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: TokenAuthenticator = Depends(get_token_authenticator),
) -> AuthContext:
    """解析 Authorization: Bearer <token>，产出 AuthContext"""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("Missing Bearer token")
    return authenticator.authenticate(credentials.credentials.strip())


def get_optional_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: TokenAuthenticator = Depends(get_token_authenticator),
) -> Optional[AuthContext]:
    if credentials is None or not credentials.credentials:
        return None
    return authenticator.authenticate(credentials.credentials.strip())


def get_current_user(
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
) -> User:
    return resolve_user(db, ctx)


def get_optional_user(
    ctx: Optional[AuthContext] = Depends(get_optional_auth_context),
    db: Session = Depends(get_db),
) -> Optional[User]:
    if ctx is None:
        return None
    return resolve_user(db, ctx)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    ensure_admin(current_user)
    return current_user


# --- 业务服务 ---

def get_auth_service() -> AuthService:
    """
    获取 AuthService 实例，邮件通过 Celery mail_queue 投递
    """
    return AuthService(
        token_codec=get_token_codec(),
        send_mail=dispatch_email,
        preference_service=preference_service,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
        signup_otp_ttl=timedelta(minutes=settings.SIGNUP_OTP_TTL_MINUTES),
        reset_otp_ttl=timedelta(minutes=settings.RESET_OTP_TTL_MINUTES),
    )


@lru_cache
def get_s3_client():
    """
    获取 S3 客户端单例实例
    """
    return boto3.client("s3", region_name=settings.AWS_REGION)


def get_upload_service() -> UploadService:
    return UploadService(
        get_s3_client(),
        bucket=settings.S3_BUCKET,
        max_bytes=settings.UPLOAD_MAX_BYTES,
        upload_expires=settings.UPLOAD_URL_EXPIRES_SECONDS,
        stream_expires=settings.STREAM_URL_EXPIRES_SECONDS,
    )
