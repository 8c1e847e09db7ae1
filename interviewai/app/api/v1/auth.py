"""
Authentication endpoints - Register, Login, Current User, Logout, Update Details
"""
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from interviewai.app.core.config import settings
from interviewai.app.core.dependencies import get_current_user, get_db
from interviewai.app.core.logging_config import get_logger
from interviewai.app.models.user import User
from interviewai.app.schemas.user import (
    AuthResponse,
    MessageResponse,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserUpdate,
    user_to_response,
)
from interviewai.app.services.auth_service import AuthService

logger = get_logger("api.auth")
router = APIRouter()


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        expires=datetime.now(timezone.utc) + timedelta(days=settings.auth_cookie_expire_days),
        httponly=True,
        secure=settings.is_production,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, response: Response, db: Session = Depends(get_db)):
    """
    Register a new user account. The user is logged in after register
    (token in body and in the auth cookie).

    - **name**: User's display name
    - **email**: User's email address (must be unique)
    - **password**: User's password (at least 6 characters)
    """
    logger.info("Registration attempt for email=%s", user_data.email)
    result = AuthService.register_user(db, user_data)

    if not result["success"]:
        logger.warning(
            "Registration failed email=%s reason=%s",
            user_data.email,
            result["message"],
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result["message"],
        )

    user = result["user"]
    logger.info(
        "User registered successfully user_id=%s email=%s",
        user.id,
        user.email,
    )
    _set_auth_cookie(response, result["access_token"])
    return AuthResponse(token=result["access_token"], user=user_to_response(user))


@router.post("/login", response_model=AuthResponse)
def login(login_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    """
    Login user and get access token

    - **email**: User's email address
    - **password**: User's password
    """
    logger.info("Login attempt for email=%s", login_data.email)
    result = AuthService.login_user(db, login_data)

    if not result["success"]:
        logger.warning(
            "Login failed email=%s reason=%s",
            login_data.email,
            result["message"],
        )
        raise HTTPException(
            status_code=result["status"],
            detail=result["message"],
            headers={"WWW-Authenticate": "Bearer"} if result["status"] == 401 else None,
        )

    user = result["user"]
    logger.info(
        "User logged in successfully user_id=%s email=%s",
        user.id,
        user.email,
    )
    _set_auth_cookie(response, result["access_token"])
    return AuthResponse(token=result["access_token"], user=user_to_response(user))


@router.get("/me", response_model=UserEnvelope)
def get_me(current_user: User = Depends(get_current_user)):
    """Get the current authenticated user. Used to refresh auth state on app load."""
    return UserEnvelope(user=user_to_response(current_user))


@router.api_route("/logout", methods=["GET", "POST"], response_model=MessageResponse)
def logout(response: Response):
    """Clear the auth cookie"""
    response.delete_cookie(key=settings.auth_cookie_name, httponly=True)
    return MessageResponse(message="User logged out successfully")


@router.put("/updatedetails", response_model=UserEnvelope)
def update_details(
    details: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update editable profile fields (name)"""
    user = AuthService.update_details(db, current_user, details)
    logger.info("User details updated user_id=%s", user.id)
    return UserEnvelope(user=user_to_response(user))
