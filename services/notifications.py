from __future__ import annotations
import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Protocol
import aiosmtplib
from config import settings
from email_templates import signup_otp_template, forgot_password_otp_template
from exceptions import EmailDispatchFailure
from services.otp import PURPOSE_FORGOT_PASSWORD

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    async def send(self, to: str, subject: str, html: str) -> str:
        """Deliver one HTML message and return its Message-ID."""
        ...


class SmtpMailTransport:
    def __init__(self, hostname: str, port: int, username: str | None, password: str | None,
                 from_name: str, from_email: str, start_tls: bool = True, timeout: float = 10.0):
        self.hostname = hostname
        self.port = port
        self.username = username or None
        self.password = password or None
        self.from_name = from_name
        self.from_email = from_email
        self.start_tls = start_tls
        self.timeout = timeout

    async def send(self, to: str, subject: str, html: str) -> str:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.from_name, self.from_email))
        message["To"] = to
        message_id = make_msgid(domain=self.from_email.rpartition("@")[2] or None)
        message["Message-ID"] = message_id
        message.set_content("Your email client does not support HTML messages.")
        message.add_alternative(html, subtype="html")

        await aiosmtplib.send(
            message,
            hostname=self.hostname,
            port=self.port,
            username=self.username,
            password=self.password,
            use_tls=False,  # Use STARTTLS instead of direct TLS
            start_tls=self.start_tls,
            timeout=self.timeout,
        )
        return message_id


@dataclass
class DispatchResult:
    success: bool
    message_id: str | None = None
    warning: str | None = None


class NotificationDispatcher:
    """Renders OTP emails and hands them to the mail transport."""

    def __init__(self, transport: MailTransport, app_name: str, environment: str = "production",
                 ttl_minutes: int = settings.OTP_EXPIRE_MINUTES):
        self.transport = transport
        self.app_name = app_name
        self.environment = environment
        self.ttl_minutes = ttl_minutes

    def render(self, otp: str, purpose: str, name: str | None) -> tuple[str, str]:
        if purpose == PURPOSE_FORGOT_PASSWORD:
            subject = f"Reset Your Password - {self.app_name}"
            html = forgot_password_otp_template(otp, name, self.app_name, self.ttl_minutes)
        else:
            subject = f"Verify Your Email - {self.app_name}"
            html = signup_otp_template(otp, name, self.app_name, self.ttl_minutes)
        return subject, html

    async def send_otp_email(self, to: str, otp: str, purpose: str, name: str | None = None) -> DispatchResult:
        if not to or not otp:
            raise ValueError("Email and OTP are required")
        recipient = to.strip().lower()
        subject, html = self.render(otp, purpose, name)
        try:
            message_id = await self.transport.send(recipient, subject, html)
        except Exception as e:
            if self.environment.lower() == "development":
                # No mail relay in dev: surface the code in the server log instead
                logger.warning(
                    "Email not sent, OTP available in server log",
                    extra={"email": recipient, "purpose": purpose, "otp": otp, "error": str(e)},
                )
                return DispatchResult(success=True, warning="Email not sent, but OTP is available in server log")
            logger.error("Failed to send OTP email", extra={"email": recipient, "purpose": purpose}, exc_info=True)
            raise EmailDispatchFailure() from e
        logger.info("OTP email sent", extra={"email": recipient, "purpose": purpose, "message_id": message_id})
        return DispatchResult(success=True, message_id=message_id)


_transport = SmtpMailTransport(
    hostname=settings.SMTP_HOST,
    port=settings.SMTP_PORT,
    username=settings.SMTP_USERNAME,
    password=settings.SMTP_PASSWORD,
    from_name=settings.MAIL_FROM_NAME,
    from_email=settings.MAIL_FROM_EMAIL,
    start_tls=settings.SMTP_START_TLS,
    timeout=settings.SMTP_TIMEOUT,
)

def get_mail_transport() -> MailTransport:
    return _transport
