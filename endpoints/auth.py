from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from auth_service import AuthService, SessionGrant
from config import settings
from database import get_db
from schemas.auth import (
    SendOtpRequest, VerifyOtpRequest, SignupRequest, LoginRequest,
    ForgotPasswordRequest, ResetPasswordRequest, SessionClaims,
    MessageResponse, AuthResponse, CurrentUserResponse,
)
from security import SessionIssuer, get_session_issuer, authenticate_request
from services.notifications import MailTransport, NotificationDispatcher, get_mail_transport

router = APIRouter()


def get_auth_service(
    db: Session = Depends(get_db),
    issuer: SessionIssuer = Depends(get_session_issuer),
    transport: MailTransport = Depends(get_mail_transport),
) -> AuthService:
    dispatcher = NotificationDispatcher(transport, app_name=settings.APP_NAME, environment=settings.ENVIRONMENT)
    return AuthService(db, issuer, dispatcher)


def _set_session_cookie(response: Response, grant: SessionGrant) -> None:
    response.set_cookie(
        settings.COOKIE_NAME,
        grant.token,
        max_age=grant.max_age,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )


# Signup flow

@router.post("/send-otp", response_model=MessageResponse)
async def send_signup_otp(body: SendOtpRequest, service: AuthService = Depends(get_auth_service)):
    """Email a signup verification code"""
    message = await service.send_signup_otp(body.email, body.name)
    return {"success": True, "message": message}

@router.post("/verify-otp", response_model=MessageResponse)
async def verify_signup_otp(body: VerifyOtpRequest, service: AuthService = Depends(get_auth_service)):
    message = service.verify_signup_otp(body.email, body.otp)
    return {"success": True, "message": message}

@router.post("/signup", response_model=AuthResponse)
async def complete_signup(body: SignupRequest, response: Response, service: AuthService = Depends(get_auth_service)):
    """Create the account and start a 30-day session"""
    grant = service.complete_signup(body.email, body.name, body.password)
    _set_session_cookie(response, grant)
    return {"success": True, "message": "Account created successfully", "user": grant.user}


# Login

@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, response: Response, service: AuthService = Depends(get_auth_service)):
    grant = service.login(body.email, body.password, body.remember_me)
    _set_session_cookie(response, grant)
    return {"success": True, "message": "Login successful", "user": grant.user}


# Forgot password flow

@router.post("/forgot/send-otp", response_model=MessageResponse)
async def send_forgot_password_otp(body: ForgotPasswordRequest, service: AuthService = Depends(get_auth_service)):
    """Always answers the same way, registered email or not"""
    message = await service.send_forgot_password_otp(body.email)
    return {"success": True, "message": message}

@router.post("/forgot/verify-otp", response_model=MessageResponse)
async def verify_forgot_password_otp(body: VerifyOtpRequest, service: AuthService = Depends(get_auth_service)):
    message = service.verify_forgot_password_otp(body.email, body.otp)
    return {"success": True, "message": message}

@router.post("/forgot/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, service: AuthService = Depends(get_auth_service)):
    message = service.reset_password(body.email, body.new_password)
    return {"success": True, "message": message}


# Protected routes

@router.get("/me", response_model=CurrentUserResponse)
async def me(claims: SessionClaims = Depends(authenticate_request), service: AuthService = Depends(get_auth_service)):
    return {"success": True, "user": service.get_current_user(claims)}

@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response, claims: SessionClaims = Depends(authenticate_request)):
    response.delete_cookie(settings.COOKIE_NAME, path="/", httponly=True, samesite="lax", secure=settings.COOKIE_SECURE)
    return {"success": True, "message": "Logged out successfully"}


# Google OAuth (placeholders)

@router.get("/google")
async def google_oauth(service: AuthService = Depends(get_auth_service)):
    service.google_oauth()

@router.get("/google/callback")
async def google_oauth_callback(service: AuthService = Depends(get_auth_service)):
    service.google_oauth_callback()
