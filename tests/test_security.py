from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from exceptions import WeakPassword
from schemas.auth import SessionClaims
from security import (
    SessionIssuer, SHORT_SESSION_TTL, EXTENDED_SESSION_TTL,
    normalize_email, get_password_hash, verify_password, validate_password_strength,
)

SECRET = "unit-test-secret"
CLAIMS = SessionClaims(id=7, email="ann@example.com", name="Ann")


@pytest.mark.parametrize("raw", ["a@x.com", "  A@X.com ", "\tMiXeD@Example.ORG\n", "already@lower.io"])
def test_normalize_email_is_idempotent(raw):
    once = normalize_email(raw)
    assert once == once.strip().lower()
    assert normalize_email(once) == once


def test_password_hash_round_trip():
    h = get_password_hash("hunter22")
    assert h != "hunter22"
    assert h.startswith("$2")
    assert verify_password("hunter22", h)
    assert not verify_password("hunter23", h)


def test_verify_password_tolerates_garbage_hash():
    assert verify_password("hunter22", "not-a-bcrypt-hash") is False
    assert verify_password("", get_password_hash("x" * 6)) is False
    assert verify_password("hunter22", None) is False


def test_password_strength_gate():
    for weak in ["", "a", "12345"]:
        with pytest.raises(WeakPassword) as exc:
            validate_password_strength(weak)
        assert exc.value.message == "Password must be at least 6 characters long"
        assert exc.value.status_code == 400
    validate_password_strength("123456")


def test_session_presets():
    assert SHORT_SESSION_TTL == timedelta(hours=2)
    assert EXTENDED_SESSION_TTL == timedelta(days=30)


def test_session_token_round_trip():
    issuer = SessionIssuer(SECRET)
    token = issuer.issue(CLAIMS, SHORT_SESSION_TTL)
    assert issuer.validate(token) == CLAIMS


def test_session_token_embeds_issue_and_expiry():
    issuer = SessionIssuer(SECRET)
    token = issuer.issue(CLAIMS, timedelta(hours=2))
    payload = jwt.get_unverified_claims(token)
    assert payload["exp"] - payload["iat"] == 2 * 60 * 60
    assert {"id", "email", "name"} <= set(payload)


def test_session_token_invalid_after_ttl():
    three_hours_ago = datetime.now(timezone.utc) - timedelta(hours=3)
    issuer = SessionIssuer(SECRET, clock=lambda: three_hours_ago)
    token = issuer.issue(CLAIMS, SHORT_SESSION_TTL)
    assert issuer.validate(token) is None


def test_session_token_rejects_other_secret_and_tampering():
    token = SessionIssuer(SECRET).issue(CLAIMS, SHORT_SESSION_TTL)
    assert SessionIssuer("another-secret").validate(token) is None
    head, body, sig = token.split(".")
    assert SessionIssuer(SECRET).validate(f"{head}.{body}x.{sig}") is None


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_validate_never_raises(token):
    assert SessionIssuer(SECRET).validate(token) is None


def test_validate_rejects_token_without_identity_claims():
    token = jwt.encode({"sub": "someone", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)}, SECRET, algorithm="HS256")
    assert SessionIssuer(SECRET).validate(token) is None


def test_issuer_requires_secret():
    with pytest.raises(ValueError):
        SessionIssuer("")
