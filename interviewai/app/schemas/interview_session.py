"""
Interview session Pydantic schemas
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from interviewai.app.core.config import DEFAULT_AI_MODEL


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class SessionMetadata(BaseModel):
    resumeId: Optional[int] = None
    language: str = "English"
    simpleEnglish: bool = False
    extraInstructions: str = ""
    aiModel: str = DEFAULT_AI_MODEL
    createdFromFlow: bool = False


class SessionCreate(BaseModel):
    """POST /sessions body. Empty company/position are rejected by SessionService."""
    sessionType: Literal["trial", "premium"]
    company: str = ""
    position: str = ""
    resumeId: Optional[int] = None
    language: Optional[str] = None
    simpleEnglish: bool = False
    extraInstructions: Optional[str] = Field(default=None, max_length=1000)
    aiModel: Optional[str] = None
    createdFromFlow: bool = False

    @field_validator("resumeId", mode="before")
    @classmethod
    def resume_id_blank(cls, value):
        return _blank_to_none(value)


class QuestionCreate(BaseModel):
    question: str = ""
    answer: str = ""
    confidence: Optional[float] = Field(default=None, ge=0, le=1)


class SessionComplete(BaseModel):
    status: Optional[str] = None
    endTime: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)


class SessionUpdate(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    status: Optional[str] = None
    feedback: Optional[str] = Field(default=None, max_length=1000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class QuestionOut(BaseModel):
    id: int
    question: str
    answer: str
    timestamp: datetime
    confidence: float


class SessionOut(BaseModel):
    id: int
    userId: int
    sessionType: str
    company: str
    position: str
    status: str
    startTime: datetime
    endTime: Optional[datetime] = None
    duration: int = 0
    creditsUsed: int = 0
    questions: List[QuestionOut] = Field(default_factory=list)
    feedback: Optional[str] = None
    rating: Optional[int] = None
    metadata: SessionMetadata = Field(default_factory=SessionMetadata)
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class SessionEnvelope(BaseModel):
    success: bool = True
    data: SessionOut


class SessionListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[SessionOut]


class QuestionListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[QuestionOut]


def question_model_to_out(q) -> QuestionOut:
    return QuestionOut(
        id=q.id,
        question=q.question,
        answer=q.answer,
        timestamp=q.timestamp,
        confidence=q.confidence,
    )


def session_model_to_out(session) -> SessionOut:
    return SessionOut(
        id=session.id,
        userId=session.user_id,
        sessionType=session.session_type,
        company=session.company,
        position=session.position,
        status=session.status,
        startTime=session.start_time,
        endTime=session.end_time,
        duration=session.duration or 0,
        creditsUsed=session.credits_used or 0,
        questions=[question_model_to_out(q) for q in session.questions],
        feedback=session.feedback,
        rating=session.rating,
        metadata=SessionMetadata(**(session.session_metadata or {})),
        createdAt=session.created_at,
        updatedAt=session.updated_at,
    )
