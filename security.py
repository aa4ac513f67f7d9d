from datetime import datetime, timedelta, timezone
from typing import Callable
from fastapi import Depends, Request
from passlib.context import CryptContext
from jose import JWTError, jwt
from config import settings
from exceptions import Unauthenticated, Forbidden, WeakPassword
from schemas.auth import SessionClaims

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.HASH_ROUNDS)

SHORT_SESSION_TTL = timedelta(hours=settings.SESSION_TTL_HOURS)
EXTENDED_SESSION_TTL = timedelta(days=settings.REMEMBER_ME_TTL_DAYS)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def verify_password(plain_password, hashed_password):
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # unknown or malformed hash
        return False

def get_password_hash(password):
    return pwd_context.hash(password)

def validate_password_strength(password: str, min_length: int | None = None) -> None:
    min_length = settings.MIN_PASSWORD_LENGTH if min_length is None else min_length
    if len(password) < min_length:
        raise WeakPassword(f"Password must be at least {min_length} characters long")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionIssuer:
    """Mints and validates signed, time-limited session tokens.

    The secret is handed in at construction; nothing here reads or mutates
    module state, so tests can build an issuer with their own key and clock.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", clock: Callable[[], datetime] = _utcnow):
        if not secret:
            raise ValueError("Session secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, claims: SessionClaims, ttl: timedelta) -> str:
        issued_at = self._clock()
        to_encode = claims.model_dump()
        to_encode.update({"iat": issued_at, "exp": issued_at + ttl})
        return jwt.encode(to_encode, self._secret, algorithm=self._algorithm)

    def validate(self, token: str | None) -> SessionClaims | None:
        """Return the embedded claims, or None for anything not a live token."""
        if not token:
            return None
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            return None
        try:
            return SessionClaims(id=payload["id"], email=payload["email"], name=payload["name"])
        except (KeyError, ValueError):
            return None


_session_issuer = SessionIssuer(settings.JWT_SECRET, settings.JWT_ALGORITHM)

def get_session_issuer() -> SessionIssuer:
    return _session_issuer


def extract_token(request: Request) -> str | None:
    # Cookie first, then "Authorization: Bearer <token>"
    token = request.cookies.get(settings.COOKIE_NAME)
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def authenticate_request(request: Request, issuer: SessionIssuer = Depends(get_session_issuer)) -> SessionClaims:
    token = extract_token(request)
    if not token:
        raise Unauthenticated()
    claims = issuer.validate(token)
    if claims is None:
        raise Forbidden()
    request.state.user = claims
    return claims
