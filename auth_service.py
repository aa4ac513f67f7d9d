import logging
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from exceptions import (
    ValidationFailed, DuplicateUser, InvalidCredentials, UserNotFound,
    UpstreamFailure, OtpStoreFailure, UserCreateFailure, OAuthNotImplemented,
)
from models.user import User
from schemas.auth import SessionClaims, UserOut, CurrentUserOut
from security import (
    SessionIssuer, SHORT_SESSION_TTL, EXTENDED_SESSION_TTL,
    normalize_email, get_password_hash, verify_password, validate_password_strength,
)
from services.notifications import NotificationDispatcher
from services.otp import OtpService, PURPOSE_SIGNUP, PURPOSE_FORGOT_PASSWORD
from services.stores import UserStore, OtpStore

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_SENT_MESSAGE = "If an account exists with this email, an OTP has been sent"


@dataclass
class SessionGrant:
    user: UserOut
    token: str
    ttl: timedelta

    @property
    def max_age(self) -> int:
        return int(self.ttl.total_seconds())


def _present(*values) -> bool:
    return all(isinstance(v, str) and v.strip() for v in values)

def _user_out(user: User) -> UserOut:
    return UserOut(id=user.id, email=user.email, name=user.full_name)

@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    # compared against when the email is unknown so both login failures cost a bcrypt check
    return get_password_hash("not-a-real-password")


class AuthService:
    """Request-level auth workflows: validate, call engines/stores, respond."""

    def __init__(self, db: Session, issuer: SessionIssuer, dispatcher: NotificationDispatcher,
                 otp_service: OtpService | None = None):
        self.db = db
        self.users = UserStore(db)
        self.otps = otp_service or OtpService(OtpStore(db))
        self.issuer = issuer
        self.dispatcher = dispatcher

    # -- helpers -------------------------------------------------------

    def _lookup_user(self, email: str) -> User | None:
        try:
            return self.users.get_by_email(email)
        except SQLAlchemyError as e:
            logger.error("User lookup failed", extra={"email": email}, exc_info=True)
            raise UpstreamFailure() from e

    def _consume_otp(self, email: str, purpose: str, code: str) -> None:
        try:
            self.otps.consume(email, purpose, code.strip())
        except SQLAlchemyError as e:
            logger.error("OTP verification failed", extra={"email": email, "purpose": purpose}, exc_info=True)
            raise UpstreamFailure() from e

    def _issue_otp(self, email: str, purpose: str) -> str:
        try:
            return self.otps.issue(email, purpose)
        except (SQLAlchemyError, NotImplementedError) as e:
            logger.error("Error storing OTP", extra={"email": email, "purpose": purpose}, exc_info=True)
            raise OtpStoreFailure() from e

    def _grant(self, user: User, ttl: timedelta) -> SessionGrant:
        out = _user_out(user)
        token = self.issuer.issue(SessionClaims(id=out.id, email=out.email, name=out.name), ttl)
        return SessionGrant(user=out, token=token, ttl=ttl)

    # -- signup --------------------------------------------------------

    async def send_signup_otp(self, email: str | None, name: str | None) -> str:
        if not _present(email, name):
            raise ValidationFailed("Email and name are required")
        email = normalize_email(email)

        if self._lookup_user(email) is not None:
            raise DuplicateUser()

        code = self._issue_otp(email, PURPOSE_SIGNUP)
        await self.dispatcher.send_otp_email(email, code, PURPOSE_SIGNUP, name.strip())
        return "OTP sent successfully to your email"

    def verify_signup_otp(self, email: str | None, otp: str | None) -> str:
        if not _present(email, otp):
            raise ValidationFailed("Email and OTP are required")
        self._consume_otp(normalize_email(email), PURPOSE_SIGNUP, otp)
        return "OTP verified successfully"

    def complete_signup(self, email: str | None, name: str | None, password: str | None) -> SessionGrant:
        if not _present(email, name) or not password:
            raise ValidationFailed("Email, name, and password are required")
        validate_password_strength(password)
        email = normalize_email(email)

        if self._lookup_user(email) is not None:
            raise DuplicateUser()

        try:
            user = self.users.create(email, name.strip(), get_password_hash(password))
        except IntegrityError as e:
            # lost a race with a concurrent signup for the same email
            raise DuplicateUser() from e
        except SQLAlchemyError as e:
            logger.error("Error creating user", extra={"email": email}, exc_info=True)
            raise UserCreateFailure() from e

        logger.info("User created", extra={"user_id": user.id, "email": user.email})
        return self._grant(user, EXTENDED_SESSION_TTL)

    # -- login ---------------------------------------------------------

    def login(self, email: str | None, password: str | None, remember_me: bool = False) -> SessionGrant:
        if not _present(email) or not password:
            raise ValidationFailed("Email and password are required")
        email = normalize_email(email)

        user = self._lookup_user(email)
        if user is None:
            verify_password(password, _dummy_password_hash())
            logger.info("Login failed", extra={"email": email})
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.info("Login failed", extra={"email": email})
            raise InvalidCredentials()

        try:
            self.users.record_login(user.email, method="email")
        except SQLAlchemyError:
            logger.warning("Could not write login log", extra={"email": user.email}, exc_info=True)

        ttl = EXTENDED_SESSION_TTL if remember_me else SHORT_SESSION_TTL
        logger.info("Login successful", extra={"user_id": user.id, "remember_me": bool(remember_me)})
        return self._grant(user, ttl)

    # -- forgot password -----------------------------------------------

    async def send_forgot_password_otp(self, email: str | None) -> str:
        if not _present(email):
            raise ValidationFailed("Email is required")
        email = normalize_email(email)

        user = self._lookup_user(email)
        if user is None:
            # same answer as the success path so callers cannot probe for accounts
            logger.info("Password reset requested for unknown email", extra={"email": email})
            return FORGOT_PASSWORD_SENT_MESSAGE

        code = self._issue_otp(email, PURPOSE_FORGOT_PASSWORD)
        await self.dispatcher.send_otp_email(email, code, PURPOSE_FORGOT_PASSWORD, user.full_name)
        return FORGOT_PASSWORD_SENT_MESSAGE

    def verify_forgot_password_otp(self, email: str | None, otp: str | None) -> str:
        if not _present(email, otp):
            raise ValidationFailed("Email and OTP are required")
        self._consume_otp(normalize_email(email), PURPOSE_FORGOT_PASSWORD, otp)
        return "OTP verified successfully"

    def reset_password(self, email: str | None, new_password: str | None) -> str:
        # TODO: require a single-use reset grant minted by verify_forgot_password_otp
        if not _present(email) or not new_password:
            raise ValidationFailed("Email and new password are required")
        validate_password_strength(new_password)
        email = normalize_email(email)

        user = self._lookup_user(email)
        if user is None:
            raise UserNotFound()

        try:
            updated = self.users.update_password(user.id, get_password_hash(new_password))
        except SQLAlchemyError as e:
            logger.error("Error updating password", extra={"user_id": user.id}, exc_info=True)
            raise UpstreamFailure("Failed to reset password") from e
        if not updated:
            # removed between lookup and update
            raise UserNotFound()

        logger.info("Password reset", extra={"user_id": user.id})
        return "Password reset successfully"

    # -- session -------------------------------------------------------

    def get_current_user(self, claims: SessionClaims) -> CurrentUserOut:
        try:
            user = self.users.get_by_id(claims.id)
        except SQLAlchemyError as e:
            logger.error("User lookup failed", extra={"user_id": claims.id}, exc_info=True)
            raise UpstreamFailure() from e
        if user is None:
            raise UserNotFound()
        return CurrentUserOut(id=user.id, email=user.email, name=user.full_name, created_at=user.created_at)

    # -- oauth placeholders --------------------------------------------

    def google_oauth(self):
        raise OAuthNotImplemented("Google OAuth is not yet implemented.")

    def google_oauth_callback(self):
        raise OAuthNotImplemented("Google OAuth callback is not yet implemented.")
