"""
Dependency injection utilities
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from interviewai.app.core.config import settings
from interviewai.app.db.session import SessionLocal
from interviewai.app.models.user import User

security = HTTPBearer(auto_error=False)

NOT_AUTHORIZED = "Not authorized to access this route"


def get_db() -> Session:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _unauthorized(detail: str = NOT_AUTHORIZED) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    """Bearer header first, then the auth cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.auth_cookie_name) or None


def get_current_user(
    token: str | None = Depends(get_token),
    db: Session = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT"""
    if not token:
        raise _unauthorized()
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        user_id = payload.get("sub")
        if not user_id:
            raise _unauthorized()
        user_id = int(user_id)
    except (JWTError, ValueError):
        raise _unauthorized()
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise _unauthorized("No user found with this token")
    return user
