"""
安全相关的基础工具

- 密码哈希：bcrypt
- 一次性验证码：6位数字，secrets 生成，常量时间比较
- 本地会话令牌：HS256 JWT（PyJWT）
"""
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, Optional

import bcrypt
import jwt

from app.core.exceptions import AuthenticationError


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # 哈希格式损坏
        return False


def generate_otp() -> str:
    """生成 100000-999999 之间的6位数字验证码"""
    return str(100000 + secrets.randbelow(900000))


def otp_matches(expected: Optional[str], provided: str) -> bool:
    if not expected:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


@dataclass(frozen=True)
class LocalTokenCodec:
    """本地会话令牌的签发与校验

    Attributes:
        secret: HMAC 密钥
        algorithm: 签名算法，默认 HS256
        expires_minutes: 令牌有效期（分钟）
    """
    secret: str
    algorithm: str = "HS256"
    expires_minutes: int = 60 * 24 * 7

    def issue(self, *, user_id: int, role: str, is_admin: bool, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "role": role,
            "is_admin": is_admin,
            "iat": now,
            "exp": now + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e
        return payload
