# backend/tests/test_identity.py
"""
令牌签发/校验与外部身份解析测试

外部令牌使用测试内生成的 RSA 密钥签名，JWKS 客户端用桩对象替代，不访问网络。
"""
from datetime import datetime, timedelta, UTC
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from app.core.exceptions import AuthenticationError
from app.core.external_auth import ExternalTokenVerifier
from app.core.security import LocalTokenCodec, generate_otp, hash_password, otp_matches, verify_password
from app.models.user import User, UserRole
from app.services.identity_service import AuthContext, TokenAuthenticator, resolve_user
from factories import make_user

ISSUER = "https://cognito-idp.us-east-1.amazonaws.com/us-east-1_TEST"
CLIENT_ID = "test-client"


class StubJWKSClient:
    def __init__(self, public_key):
        self.public_key = public_key

    def get_signing_key_from_jwt(self, token):
        return SimpleNamespace(key=self.public_key)


@pytest.fixture(scope="module")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def verifier(rsa_key):
    return ExternalTokenVerifier(issuer=ISSUER, client_id=CLIENT_ID, jwks_client=StubJWKSClient(rsa_key.public_key()))


def external_token(rsa_key, **overrides):
    now = datetime.now(UTC)
    claims = {
        "sub": "ext-sub-123456",
        "iss": ISSUER,
        "exp": now + timedelta(hours=1),
        "iat": now,
        "token_use": "id",
        "aud": CLIENT_ID,
        "email": "Ext.User@Example.com",
        "cognito:username": "extuser",
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, rsa_key, algorithm="RS256", headers={"kid": "test-kid"})


class TestPasswordsAndCodes:

    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", rounds=4)

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)
        assert not verify_password("anything", None)
        assert not verify_password("anything", "not-a-bcrypt-hash")

    def test_otp_format(self):
        for _ in range(50):
            otp = generate_otp()
            assert len(otp) == 6 and otp.isdigit()
            assert 100000 <= int(otp) <= 999999

    def test_otp_matches(self):
        assert otp_matches("123456", "123456")
        assert not otp_matches("123456", "654321")
        assert not otp_matches(None, "123456")


class TestLocalTokenCodec:

    def test_roundtrip_claims(self):
        codec = LocalTokenCodec(secret="s" * 32)

        payload = codec.decode(codec.issue(user_id=7, role="creator", is_admin=False))

        assert payload["sub"] == "7"
        assert payload["role"] == "creator"
        assert payload["is_admin"] is False
        assert payload["exp"] - payload["iat"] == 60 * 24 * 7 * 60

    def test_expired_token(self):
        codec = LocalTokenCodec(secret="s" * 32, expires_minutes=1)
        token = codec.issue(user_id=1, role="learner", is_admin=False, now=datetime.now(UTC) - timedelta(minutes=5))

        with pytest.raises(AuthenticationError, match="Token expired"):
            codec.decode(token)

    def test_wrong_secret(self):
        token = LocalTokenCodec(secret="a" * 32).issue(user_id=1, role="learner", is_admin=False)

        with pytest.raises(AuthenticationError, match="Invalid token"):
            LocalTokenCodec(secret="b" * 32).decode(token)


class TestExternalTokenVerifier:

    def test_valid_id_token(self, rsa_key, verifier):
        payload = verifier.verify(external_token(rsa_key))

        assert payload["sub"] == "ext-sub-123456"

    def test_valid_access_token(self, rsa_key, verifier):
        token = external_token(rsa_key, token_use="access", aud=None, client_id=CLIENT_ID)

        assert verifier.verify(token)["token_use"] == "access"

    def test_id_token_audience_mismatch(self, rsa_key, verifier):
        with pytest.raises(AuthenticationError, match="aud mismatch"):
            verifier.verify(external_token(rsa_key, aud="other-client"))

    def test_access_token_client_mismatch(self, rsa_key, verifier):
        token = external_token(rsa_key, token_use="access", aud=None, client_id="other-client")

        with pytest.raises(AuthenticationError, match="client_id mismatch"):
            verifier.verify(token)

    def test_wrong_issuer(self, rsa_key, verifier):
        with pytest.raises(AuthenticationError):
            verifier.verify(external_token(rsa_key, iss="https://evil.example.com"))

    def test_signed_by_other_key(self, verifier):
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)

        with pytest.raises(AuthenticationError):
            verifier.verify(external_token(other))

    def test_expired(self, rsa_key, verifier):
        past = datetime.now(UTC) - timedelta(hours=2)

        with pytest.raises(AuthenticationError):
            verifier.verify(external_token(rsa_key, iat=past, exp=past + timedelta(minutes=5)))


class TestTokenAuthenticator:

    def test_local_token(self):
        codec = LocalTokenCodec(secret="s" * 32)
        ctx = TokenAuthenticator(codec).authenticate(codec.issue(user_id=3, role="admin", is_admin=True))

        assert ctx.provider == "local"
        assert ctx.user_id == 3
        assert ctx.role == UserRole.ADMIN

    def test_external_token_without_verifier_is_rejected(self, rsa_key):
        authenticator = TokenAuthenticator(LocalTokenCodec(secret="s" * 32))

        with pytest.raises(AuthenticationError):
            authenticator.authenticate(external_token(rsa_key))

    def test_external_token(self, rsa_key, verifier):
        authenticator = TokenAuthenticator(LocalTokenCodec(secret="s" * 32), verifier)

        ctx = authenticator.authenticate(external_token(rsa_key))

        assert ctx.provider == "external"
        assert ctx.subject == "ext-sub-123456"
        assert ctx.username == "extuser"


class TestResolveUser:

    def test_provisions_external_user_once(self, db):
        ctx = AuthContext(subject="ext-sub-123456", provider="external", username="extuser", email="Ext.User@Example.com")

        first = resolve_user(db, ctx)
        second = resolve_user(db, ctx)

        assert first.id == second.id
        assert first.auth_sub == "ext-sub-123456"
        assert first.email == "ext.user@example.com"
        assert first.role == UserRole.LEARNER
        assert db.query(User).filter(User.auth_sub == "ext-sub-123456").count() == 1

    def test_does_not_overwrite_name(self, db):
        ctx = AuthContext(subject="ext-sub-123456", provider="external", username="extuser")
        user = resolve_user(db, ctx)
        user.name = "Chosen Name"
        db.commit()

        again = resolve_user(db, AuthContext(subject="ext-sub-123456", provider="external", username="renamed", email="late@example.com"))

        assert again.name == "Chosen Name"
        assert again.email == "late@example.com"

    def test_email_owned_by_local_account_is_not_claimed(self, db):
        make_user(db, "shared@example.com")

        user = resolve_user(db, AuthContext(subject="ext-sub-999999", provider="external", email="shared@example.com"))

        assert user.email is None

    def test_external_route_access(self, client, db, rsa_key, verifier):
        from app.config.dependency_injection import get_token_authenticator, get_token_codec
        from app.main import app
        from factories import API

        app.dependency_overrides[get_token_authenticator] = lambda: TokenAuthenticator(get_token_codec(), verifier)

        response = client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {external_token(rsa_key)}"})

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "extuser"
