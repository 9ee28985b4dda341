"""
外部身份提供方（Cognito 用户池）令牌校验

签名通过发行方公布的 JWKS 校验，issuer 必须一致；
ID 令牌要求 aud == client_id，Access 令牌要求 client_id 声明一致。
"""
import logging
from typing import Any, Dict, Optional

import jwt
from jwt import PyJWKClient

from app.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class ExternalTokenVerifier:
    def __init__(self, *, issuer: str, client_id: str, jwks_client: Optional[PyJWKClient] = None):
        self.issuer = issuer.rstrip("/")
        self.client_id = client_id
        self.jwks_client = jwks_client or PyJWKClient(f"{self.issuer}/.well-known/jwks.json")

    def verify(self, token: str) -> Dict[str, Any]:
        """
        校验外部令牌并返回 payload。

        Raises:
            AuthenticationError: 签名、issuer、audience/client_id 不匹配，或缺少 sub
        """
        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
            # audience 按令牌类型手动检查，ID 与 Access 令牌携带的声明不同
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options={"verify_aud": False, "require": ["exp", "iss"]},
            )
        except jwt.PyJWTError as e:
            logger.info(f"External token rejected: {e}")
            raise AuthenticationError(f"Invalid token: {e}") from e

        if not str(payload.get("sub") or ""):
            raise AuthenticationError("Invalid token (no sub)")

        token_use = payload.get("token_use")
        aud = payload.get("aud")
        client_id = payload.get("client_id")
        if token_use == "id":
            if aud != self.client_id:
                raise AuthenticationError("Invalid token (aud mismatch)")
        elif token_use == "access":
            if client_id != self.client_id:
                raise AuthenticationError("Invalid token (client_id mismatch)")
        elif not (aud == self.client_id or client_id == self.client_id):
            raise AuthenticationError("Invalid token (unrecognized token_use)")

        return payload
