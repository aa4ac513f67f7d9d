"""Error taxonomy for the auth workflows.

Every error carries the HTTP status and the client-safe message. ``main.py``
renders them as ``{"success": false, "message": ...}``.
"""
from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


# 400
class ValidationFailed(AuthError):
    message = "Invalid request body"


class DuplicateUser(AuthError):
    message = "User with this email already exists"


class WeakPassword(AuthError):
    message = "Password must be at least 6 characters long"


class OtpError(AuthError):
    message = "Invalid or expired OTP"


class OtpNotFound(OtpError):
    message = "Invalid or expired OTP"


class OtpExpired(OtpError):
    message = "OTP has expired"


class OtpMismatch(OtpError):
    message = "Invalid OTP"


# 401 / 403
class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"


class Unauthenticated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access denied. No token provided."


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid or expired token."


# 404
class UserNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


# 500: store or mail transport failures
class UpstreamFailure(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


class OtpStoreFailure(UpstreamFailure):
    message = "Failed to store OTP"


class UserCreateFailure(UpstreamFailure):
    message = "Failed to create user account"


class EmailDispatchFailure(UpstreamFailure):
    message = "Failed to send OTP email"


# 501
class OAuthNotImplemented(AuthError):
    status_code = status.HTTP_501_NOT_IMPLEMENTED
    message = "Google OAuth is not yet implemented."
