"""Auth endpoints: register, login, refresh."""

from typing import Optional

from fastapi import APIRouter, HTTPException, status

from minimind.db.models.profile import Profile
from minimind.dependencies import DbSession
from minimind.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    RefreshRequest,
    RefreshResponse,
    TokenPair,
    UserResponse,
)
from minimind.services.auth_service import (
    register as do_register,
    login as do_login,
    refresh_tokens,
)

router = APIRouter(prefix="/auth", tags=["auth"])


def profile_response(profile: Optional[Profile]) -> ProfileResponse:
    if profile is None:
        return ProfileResponse(plan="free")
    return ProfileResponse(plan=profile.plan, stripeCustomerId=profile.stripe_customer_id)


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    db: DbSession,
):
    try:
        user, profile, access, refresh = do_register(
            db, email=body.email, password=body.password, name=body.name
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return AuthResponse(
        user=UserResponse.model_validate(user),
        profile=profile_response(profile),
        tokens=TokenPair(accessToken=access, refreshToken=refresh),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: DbSession,
):
    try:
        user, profile, access, refresh = do_login(db, email=body.email, password=body.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return AuthResponse(
        user=UserResponse.model_validate(user),
        profile=profile_response(profile),
        tokens=TokenPair(accessToken=access, refreshToken=refresh),
    )


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    body: RefreshRequest,
    db: DbSession,
):
    try:
        _, access, refresh = refresh_tokens(db, body.refreshToken)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return RefreshResponse(accessToken=access, refreshToken=refresh)
