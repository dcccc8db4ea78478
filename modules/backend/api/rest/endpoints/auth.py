"""
Auth API Endpoints.

Bearer-token account overlay. Tokens are stateless JWTs; logout only
acknowledges, the client discards its token.
"""

from fastapi import APIRouter

from modules.backend.core.dependencies import CurrentUser, DbSession, RequestId
from modules.backend.schemas.base import MessageResponse
from modules.backend.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserResponse,
)
from modules.backend.services.auth import AuthService

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    summary="Register an account",
)
async def register(
    data: RegisterRequest,
    db: DbSession,
    request_id: RequestId,
) -> AuthResponse:
    """Create an account and return a token."""
    user, token = await AuthService(db).register(data)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
)
async def login(
    data: LoginRequest,
    db: DbSession,
    request_id: RequestId,
) -> AuthResponse:
    """Exchange email and password for a token."""
    user, token = await AuthService(db).login(data.email, data.password)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get(
    "/me",
    response_model=AuthResponse,
    summary="Current user",
)
async def me(user: CurrentUser, request_id: RequestId) -> AuthResponse:
    """Return the profile the token belongs to."""
    return AuthResponse(message="OK", user=UserResponse.model_validate(user))


@router.put(
    "/profile",
    response_model=AuthResponse,
    summary="Update profile",
)
async def update_profile(
    data: ProfileUpdateRequest,
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> AuthResponse:
    """Update the provided profile fields."""
    updated = await AuthService(db).update_profile(user, data)
    return AuthResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(updated),
    )


@router.delete(
    "/account",
    response_model=MessageResponse,
    summary="Deactivate account",
)
async def deactivate_account(
    user: CurrentUser,
    db: DbSession,
    request_id: RequestId,
) -> MessageResponse:
    """Soft delete the current account."""
    await AuthService(db).deactivate(user)
    return MessageResponse(message="Account deactivated")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
)
async def logout(request_id: RequestId) -> MessageResponse:
    """Stateless logout; the client drops its token."""
    return MessageResponse(message="Logged out successfully")
