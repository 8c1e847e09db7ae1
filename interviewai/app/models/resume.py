"""
Resume - candidate background document, injected into interview prompts
"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.dialects.sqlite import JSON

from interviewai.app.db.base import Base


class Resume(Base):
    __tablename__ = "resumes"
    # Store-level guard: a user can never hold two default resumes
    __table_args__ = (
        Index(
            "uq_resumes_user_default",
            "user_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(100), nullable=False)
    personal_details = Column(JSON, default=dict)  # {name, email, address, phone}
    introduction = Column(Text, default="")
    education = Column(JSON, default=list)
    experience = Column(JSON, default=list)
    other_experience = Column(JSON, default=list)
    skills = Column(JSON, default=list)
    languages = Column(JSON, default=list)
    certifications = Column(JSON, default=list)
    projects = Column(JSON, default=list)

    is_default = Column(Boolean, default=False, nullable=False)
    original_file_name = Column(String(255), nullable=True)
    parsed_from_pdf = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
