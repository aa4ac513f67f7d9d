from __future__ import annotations
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable
from passlib.context import CryptContext
from config import settings
from exceptions import OtpNotFound, OtpExpired, OtpMismatch
from services.stores import OtpStore

logger = logging.getLogger(__name__)

PURPOSE_SIGNUP = "signup"
PURPOSE_FORGOT_PASSWORD = "forgot_password"
PURPOSES = (PURPOSE_SIGNUP, PURPOSE_FORGOT_PASSWORD)

OTP_MIN = 100000
OTP_MAX = 999999

otp_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.HASH_ROUNDS)


def generate_otp() -> str:
    """Six-digit code drawn uniformly from [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))

def hash_otp(code: str) -> str:
    return otp_context.hash(code)

def verify_otp(code: str, otp_hash: str) -> bool:
    if not code or not otp_hash:
        return False
    try:
        return otp_context.verify(code, otp_hash)
    except (ValueError, TypeError):
        return False


class OtpService:
    """Issues and consumes one-time codes stored as (email, purpose) rows."""

    def __init__(self, store: OtpStore, clock: Callable[[], datetime] = datetime.utcnow,
                 ttl_minutes: int = settings.OTP_EXPIRE_MINUTES):
        self.store = store
        self.clock = clock
        self.ttl_minutes = ttl_minutes

    def issue(self, email: str, purpose: str, ttl_minutes: int | None = None) -> str:
        """Replace any live code for the pair and return the new plaintext code.

        The plaintext is only for immediate dispatch; it is never stored or
        logged here.
        """
        if purpose not in PURPOSES:
            raise ValueError(f"Unknown OTP purpose: {purpose}")
        ttl = self.ttl_minutes if ttl_minutes is None else ttl_minutes
        code = generate_otp()
        expires_at = self.clock() + timedelta(minutes=ttl)
        self.store.upsert(email, purpose, hash_otp(code), expires_at)
        logger.info("OTP issued", extra={"email": email, "purpose": purpose, "expires_at": expires_at.isoformat()})
        return code

    def consume(self, email: str, purpose: str, code: str) -> None:
        record = self.store.get(email, purpose)
        if record is None:
            raise OtpNotFound()
        # expiry is checked before the code so a stale correct code reads as expired
        if self.clock() > record.expires_at:
            raise OtpExpired()
        if not verify_otp(code, record.otp_hash):
            raise OtpMismatch()
        self.store.delete(email, purpose)
        logger.info("OTP consumed", extra={"email": email, "purpose": purpose})
