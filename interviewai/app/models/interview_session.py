"""
InterviewSession - one rehearsal session and its append-only question log
"""
import math
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, event
from sqlalchemy.dialects.sqlite import JSON
from sqlalchemy.orm import relationship

from interviewai.app.db.base import Base


def elapsed_minutes(start_time: datetime, end_time: datetime) -> int:
    """Whole minutes between two instants, halves rounded up."""
    seconds = (end_time - start_time).total_seconds()
    return int(math.floor(seconds / 60 + 0.5))


class InterviewSession(Base):
    __tablename__ = "interview_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    session_type = Column(String(20), nullable=False)  # trial | premium
    company = Column(String(100), nullable=False)
    position = Column(String(100), nullable=False)
    status = Column(String(20), default="active", nullable=False)  # active | completed | cancelled

    start_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_time = Column(DateTime, nullable=True)
    duration = Column(Integer, default=0, nullable=False)  # minutes
    credits_used = Column(Integer, default=0, nullable=False)

    feedback = Column(Text, nullable=True)
    rating = Column(Integer, nullable=True)  # 1-5
    # {resumeId, language, simpleEnglish, extraInstructions, aiModel, createdFromFlow}
    session_metadata = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    questions = relationship(
        "SessionQuestion",
        back_populates="session",
        order_by="SessionQuestion.id",
        cascade="all, delete-orphan",
    )


class SessionQuestion(Base):
    __tablename__ = "session_questions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(
        Integer, ForeignKey("interview_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    confidence = Column(Float, default=0.8, nullable=False)

    session = relationship("InterviewSession", back_populates="questions")


@event.listens_for(InterviewSession, "before_insert")
@event.listens_for(InterviewSession, "before_update")
def _recompute_duration(mapper, connection, target: InterviewSession) -> None:
    if target.start_time and target.end_time:
        target.duration = elapsed_minutes(target.start_time, target.end_time)
