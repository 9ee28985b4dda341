import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError
from app.core.external_auth import ExternalTokenVerifier
from app.core.security import LocalTokenCodec
from app.crud.crud_user import user as crud_user
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """认证步骤产出的身份上下文，显式传递给后续处理函数

    Attributes:
        subject: 令牌中的 sub（本地令牌为用户ID字符串）
        provider: local 或 external
        user_id: 本地令牌直接携带的用户ID
        role: 本地令牌携带的角色
        username / email: 外部令牌中的用户信息
    """
    subject: str
    provider: Literal["local", "external"]
    user_id: Optional[int] = None
    role: Optional[UserRole] = None
    username: Optional[str] = None
    email: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict, compare=False)


class TokenAuthenticator:
    """根据令牌头部的算法选择本地 HS256 校验或外部 JWKS 校验"""

    def __init__(self, local_codec: LocalTokenCodec, external_verifier: Optional[ExternalTokenVerifier] = None):
        self.local_codec = local_codec
        self.external_verifier = external_verifier

    def authenticate(self, token: str) -> AuthContext:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.PyJWTError as e:
            raise AuthenticationError("Invalid token") from e

        if header.get("alg") == self.local_codec.algorithm:
            payload = self.local_codec.decode(token)
            try:
                user_id = int(payload["sub"])
                role = UserRole(payload.get("role", UserRole.LEARNER.value))
            except (TypeError, ValueError) as e:
                raise AuthenticationError("Invalid token") from e
            return AuthContext(subject=payload["sub"], provider="local", user_id=user_id, role=role, claims=payload)

        if self.external_verifier is None:
            raise AuthenticationError("Invalid token")

        payload = self.external_verifier.verify(token)
        username = (
            payload.get("preferred_username")
            or payload.get("cognito:username")
            or payload.get("username")
        )
        return AuthContext(
            subject=str(payload["sub"]),
            provider="external",
            username=username,
            email=payload.get("email"),
            claims=payload,
        )


def resolve_user(db: Session, ctx: AuthContext) -> User:
    """
    把身份上下文解析为本地用户记录。

    外部身份首次出现时按 auth_sub 创建本地用户；之后只补全邮箱，不覆盖显示名称。
    """
    if ctx.provider == "local":
        user = crud_user.get(db, ctx.user_id)
        if user is None:
            raise AuthenticationError("User no longer exists")
        return user

    user = crud_user.get_by_auth_sub(db, auth_sub=ctx.subject)
    email = ctx.email.strip().lower() if ctx.email else None
    if user is not None:
        if email and not user.email and crud_user.get_by_email(db, email=email) is None:
            user.email = email
            db.commit()
        return user

    if email and crud_user.get_by_email(db, email=email) is not None:
        # 邮箱已被本地账号占用，外部账号不绑定邮箱
        email = None
    username = ctx.username or f"user_{ctx.subject[:6]}"
    if crud_user.get_multi(db, filter_conditions={"username": username}, limit=1):
        username = f"{username}_{ctx.subject[:6]}"
    user = User(
        auth_sub=ctx.subject,
        username=username,
        name=ctx.username or (email.split("@")[0] if email else "User"),
        email=email,
        role=UserRole.LEARNER,
        is_verified=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # 并发请求已经创建了同一个外部用户
        db.rollback()
        user = crud_user.get_by_auth_sub(db, auth_sub=ctx.subject)
        if user is None:
            raise
        return user
    db.refresh(user)
    logger.info(f"Provisioned local user {user.id} for external subject {ctx.subject}")
    return user
