"""
Authentication service business logic
"""
import re

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from interviewai.app.core.config import NAME_MAX_LENGTH, PASSWORD_MIN_LENGTH, settings
from interviewai.app.core.security import verify_password, get_password_hash, create_access_token
from interviewai.app.models.user import User
from interviewai.app.schemas.user import UserRegister, UserLogin, UserUpdate

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "email": user.email})


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def register_user(db: Session, user_data: UserRegister):
        """Register a new user"""
        name = (user_data.name or "").strip()
        email = (user_data.email or "").strip().lower()
        password = user_data.password or ""
        if not name or not email or not password:
            return {"success": False, "message": "Please provide name, email and password"}
        if len(name) > NAME_MAX_LENGTH:
            return {"success": False, "message": f"Name cannot be more than {NAME_MAX_LENGTH} characters"}
        if not EMAIL_PATTERN.match(email):
            return {"success": False, "message": "Please provide a valid email"}
        if len(password) < PASSWORD_MIN_LENGTH:
            return {"success": False, "message": f"Password must be at least {PASSWORD_MIN_LENGTH} characters"}

        try:
            # Check if user already exists
            existing_user = db.query(User).filter(User.email == email).first()
            if existing_user:
                return {"success": False, "message": "User already exists with this email"}

            new_user = User(
                name=name,
                email=email,
                hashed_password=get_password_hash(password),
                credits=settings.default_user_credits,
                is_verified=False,
            )

            db.add(new_user)
            db.commit()
            db.refresh(new_user)

            # User is logged in after register
            return {
                "success": True,
                "user": new_user,
                "message": "User registered successfully",
                "access_token": issue_token(new_user),
            }
        except IntegrityError:
            db.rollback()
            return {"success": False, "message": "User already exists with this email"}

    @staticmethod
    def login_user(db: Session, login_data: UserLogin):
        """Authenticate user and return access token"""
        email = (login_data.email or "").strip().lower()
        password = login_data.password or ""
        if not email or not password:
            return {"success": False, "status": 400, "message": "Please provide an email and password"}

        user = db.query(User).filter(User.email == email).first()
        if not user or not verify_password(password, user.hashed_password):
            return {"success": False, "status": 401, "message": "Invalid credentials"}

        return {
            "success": True,
            "access_token": issue_token(user),
            "user": user,
            "message": "Login successful",
        }

    @staticmethod
    def update_details(db: Session, user: User, details: UserUpdate) -> User:
        """Apply the editable profile fields that were sent"""
        if details.name is not None:
            name = details.name.strip()
            if name:
                user.name = name[:NAME_MAX_LENGTH]
        db.commit()
        db.refresh(user)
        return user
