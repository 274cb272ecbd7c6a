"""Token issuer/verifier and startup configuration tests."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pydantic
import pytest

from itemvault.auth.jwt import Identity, TokenIssuer
from itemvault.config import Settings
from itemvault.errors import ConfigurationError, ExpiredTokenError, InvalidTokenError

SECRET = "unit-test-secret"


@pytest.fixture()
def issuer():
    return TokenIssuer(SECRET)


def test_issued_token_verifies(issuer):
    account_id = uuid.uuid4()
    token = issuer.issue(account_id, "alice")
    assert issuer.verify(token) == Identity(account_id=account_id, username="alice")


def test_token_expires_after_ttl(issuer):
    payload = jwt.decode(
        issuer.issue(uuid.uuid4(), "alice"), SECRET, algorithms=["HS256"]
    )
    assert payload["exp"] - payload["iat"] == 3600


def test_expired_token_is_expired_not_invalid(issuer):
    expired = TokenIssuer(SECRET, ttl=timedelta(seconds=-5)).issue(uuid.uuid4(), "alice")

    with pytest.raises(ExpiredTokenError) as exc_info:
        issuer.verify(expired)
    assert not isinstance(exc_info.value, InvalidTokenError)
    assert exc_info.value.message == "Token has expired"


def test_other_secret_is_invalid(issuer):
    forged = TokenIssuer("some-other-secret").issue(uuid.uuid4(), "alice")
    with pytest.raises(InvalidTokenError):
        issuer.verify(forged)


def test_expired_token_with_other_secret_is_invalid(issuer):
    """Signature is checked first: a forged expired token is invalid, not expired."""
    forged = TokenIssuer("some-other-secret", ttl=timedelta(seconds=-5)).issue(
        uuid.uuid4(), "alice"
    )
    with pytest.raises(InvalidTokenError):
        issuer.verify(forged)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_invalid(issuer, token):
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_missing_username_claim_is_invalid(issuer):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


def test_non_uuid_subject_is_invalid(issuer):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "42", "username": "alice", "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        issuer.verify(token)


@pytest.mark.parametrize("secret", ["", "   "])
def test_empty_secret_refused(secret):
    with pytest.raises(ConfigurationError):
        TokenIssuer(secret)


def test_settings_require_secret(monkeypatch):
    monkeypatch.delenv("ITEMVAULT_JWT_SECRET", raising=False)
    with pytest.raises(pydantic.ValidationError):
        Settings(database_url="sqlite+aiosqlite://")


def test_settings_reject_blank_secret():
    with pytest.raises(pydantic.ValidationError):
        Settings(database_url="sqlite+aiosqlite://", jwt_secret="  ")


def test_issuer_from_settings():
    cfg = Settings(
        database_url="sqlite+aiosqlite://",
        jwt_secret=SECRET,
        access_token_expire_minutes=5,
    )
    issuer = TokenIssuer.from_settings(cfg)
    assert issuer.ttl == timedelta(minutes=5)
    token = issuer.issue(uuid.uuid4(), "bob")
    assert TokenIssuer(SECRET).verify(token).username == "bob"
