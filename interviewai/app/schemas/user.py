"""
User Pydantic schemas for request/response validation
"""
from pydantic import BaseModel
from typing import Optional


class UserRegister(BaseModel):
    """Schema for user registration. Presence is checked by AuthService."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserLogin(BaseModel):
    """Schema for user login"""
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(BaseModel):
    """Schema for PUT /auth/updatedetails"""
    name: Optional[str] = None


class UserResponse(BaseModel):
    """Public user fields - the password hash is never part of a response"""
    id: int
    name: str
    email: str
    credits: int = 0
    isVerified: bool = False
    avatar: str = ""


class AuthResponse(BaseModel):
    """Schema for register/login response"""
    success: bool = True
    token: str
    user: UserResponse


class UserEnvelope(BaseModel):
    success: bool = True
    user: UserResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def user_to_response(user) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name or "",
        email=user.email or "",
        credits=user.credits or 0,
        isVerified=bool(user.is_verified),
        avatar=user.avatar or "",
    )
