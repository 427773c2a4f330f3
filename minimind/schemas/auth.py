"""Auth request/response schemas."""

from uuid import UUID
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refreshToken: str


class TokenPair(BaseModel):
    accessToken: str
    refreshToken: str
    tokenType: str = "bearer"


class UserResponse(BaseModel):
    id: UUID
    email: str
    name: Optional[str]

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    plan: str
    stripeCustomerId: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserResponse
    profile: ProfileResponse
    tokens: TokenPair


class RefreshResponse(BaseModel):
    accessToken: str
    refreshToken: str
    tokenType: str = "bearer"


class MeUpdateRequest(BaseModel):
    name: Optional[str] = None
