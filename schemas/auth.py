from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

# Request bodies keep every field optional: presence is checked by the
# workflows so that missing fields produce the documented 400 messages.


class SendOtpRequest(BaseModel):
    email: str | None = None
    name: str | None = None


class VerifyOtpRequest(BaseModel):
    email: str | None = None
    otp: str | None = None

    # clients often post the code as a JSON number
    model_config = ConfigDict(coerce_numbers_to_str=True)


class SignupRequest(BaseModel):
    email: str | None = None
    name: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    remember_me: bool = Field(default=False, alias="rememberMe")

    model_config = ConfigDict(populate_by_name=True)


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    email: str | None = None
    new_password: str | None = Field(default=None, alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class SessionClaims(BaseModel):
    """Identity embedded in a session token."""
    id: int
    email: str
    name: str


class UserOut(BaseModel):
    id: int
    email: str
    name: str


class CurrentUserOut(UserOut):
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class AuthResponse(MessageResponse):
    user: UserOut


class CurrentUserResponse(BaseModel):
    success: bool = True
    user: CurrentUserOut
