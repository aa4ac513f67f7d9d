from .user import User
from .otp import Otp
from .login_log import LoginLog

__all__ = ["User", "Otp", "LoginLog"]
