"""Authentication API routes.

Provides endpoints for registration, login, password reset, token refresh,
logout and the current user's profile.
"""

from fastapi import APIRouter, Body, Request, status

from latchkey.domain.entities.user import PublicUser
from latchkey.domain.services import (
    LoginInput,
    RegisterInput,
    ResetPasswordInput,
    forgot_password_message,
)
from latchkey.infrastructure.api.dependencies import AuthenticatedUser, AuthServiceDep
from latchkey.infrastructure.api.schemas import (
    AuthResponse,
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenPairResponse,
)

router = APIRouter()

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Invalid credentials or token"}}


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={409: {"model": ErrorResponse, "description": "Email or username already exists"}},
)
async def register(request: RegisterRequest, auth_service: AuthServiceDep) -> AuthResponse:
    """Register a new user and return a token pair."""
    result = await auth_service.register(
        RegisterInput(
            email=request.email,
            password=request.password,
            username=request.username,
            full_name=request.full_name,
            phone=request.phone,
        )
    )
    return AuthResponse(
        user=result.user,
        tokens=TokenPairResponse(
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        ),
    )


@router.post("/login", response_model=AuthResponse, responses=_UNAUTHORIZED)
async def login(request: LoginRequest, auth_service: AuthServiceDep) -> AuthResponse:
    """Log in with email and password."""
    result = await auth_service.login(LoginInput(email=request.email, password=request.password))
    return AuthResponse(
        user=result.user,
        tokens=TokenPairResponse(
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
        ),
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: ForgotPasswordRequest,
    http_request: Request,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    """Request a password reset token.

    Always succeeds with the same message, whether or not the email exists.
    """
    await auth_service.forgot_password(request.email)
    settings = http_request.app.state.settings
    return MessageResponse(message=forgot_password_message(settings.is_development))


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={**_UNAUTHORIZED, 404: {"model": ErrorResponse, "description": "User not found"}},
)
async def reset_password(
    request: ResetPasswordRequest, auth_service: AuthServiceDep
) -> MessageResponse:
    """Set a new password with a single-use reset token."""
    await auth_service.reset_password(
        ResetPasswordInput(token=request.token, new_password=request.new_password)
    )
    return MessageResponse(message="Reset password successfully")


@router.post("/refresh", response_model=TokenPairResponse, responses=_UNAUTHORIZED)
async def refresh(request: RefreshRequest, auth_service: AuthServiceDep) -> TokenPairResponse:
    """Exchange a refresh token for a new token pair."""
    tokens = await auth_service.refresh_auth_tokens(request.refresh_token)
    return TokenPairResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/logout", response_model=MessageResponse, responses=_UNAUTHORIZED)
async def logout(
    current_user: AuthenticatedUser,
    auth_service: AuthServiceDep,
    request: LogoutRequest | None = Body(default=None),
) -> MessageResponse:
    """Log out, revoking the given refresh token's session."""
    refresh_token = request.refresh_token if request else None
    await auth_service.logout(current_user.user_id, refresh_token)
    return MessageResponse(message="Logout successfully")


@router.get(
    "/me",
    response_model=PublicUser,
    responses={**_UNAUTHORIZED, 404: {"model": ErrorResponse, "description": "User not found"}},
)
async def me(current_user: AuthenticatedUser, auth_service: AuthServiceDep) -> PublicUser:
    """Return the current user's profile."""
    return await auth_service.get_me(current_user.user_id)
