"""
User - account identity and credit balance
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from interviewai.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)  # always stored lowercase
    hashed_password = Column(String(255), nullable=False)
    avatar = Column(String(512), default="")
    credits = Column(Integer, default=5, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
