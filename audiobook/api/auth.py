"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from audiobook.api.dependencies import get_auth_service, get_current_user
from audiobook.models.user import User
from audiobook.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    GoogleLogin,
    MessageResponse,
    RefreshTokenRequest,
    ResetPasswordRequest,
    TokenPair,
    UserLogin,
    UserResponse,
    UserSignup,
)
from audiobook.services.auth import AuthResult, AuthService
from audiobook.services.google import GoogleAuthService, get_google_auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(result: AuthResult, message: str | None = None) -> AuthResponse:
    return AuthResponse(
        message=message,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    user_data: UserSignup,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    result = auth_service.signup(user_data.name, user_data.email, user_data.password)
    return _auth_response(result, "User created successfully")


@router.post("/login", response_model=AuthResponse)
def login(
    credentials: UserLogin,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    result = auth_service.login(credentials.email, credentials.password)
    return _auth_response(result)


@router.post("/google", response_model=AuthResponse)
async def google_login(
    request: GoogleLogin,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    google: Annotated[GoogleAuthService, Depends(get_google_auth_service)],
):
    """Sign in with a Google ID token or access token."""
    if not request.token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No token provided")

    profile = await google.verify(request.token)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    result = auth_service.login_with_google(profile)
    return _auth_response(result)


@router.post("/refresh-token", response_model=TokenPair)
def refresh_token(
    request: RefreshTokenRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Exchange a refresh token for a new token pair."""
    result = auth_service.refresh(request.refresh_token)
    return TokenPair(access_token=result.access_token, refresh_token=result.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    current_user: Annotated[User, Depends(get_current_user)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Logout and invalidate the stored refresh token."""
    auth_service.logout(current_user)
    return MessageResponse(message="Logged out successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    request: ForgotPasswordRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Start a password reset."""
    auth_service.forgot_password(request.email)
    return MessageResponse(
        message="If an account exists with this email, you will receive password reset instructions."
    )


@router.post("/reset-password", response_model=AuthResponse)
def reset_password(
    request: ResetPasswordRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Set a new password using an emailed reset token."""
    result = auth_service.reset_password(request.token, request.new_password)
    return _auth_response(result, "Password reset successful")


@router.get("/me", response_model=UserResponse)
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return current_user
