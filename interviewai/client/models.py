"""
Client-side state: wizard input, session configuration, conversation and the
persisted session view.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from interviewai.app.core.config import (
    DEFAULT_AI_MODEL,
    PREVIEW_DEFAULT_HEIGHT,
    PREVIEW_DEFAULT_WIDTH,
    TRIAL_TIME_BUDGET,
)


class WizardParams(BaseModel):
    """Everything the creation wizard collects before the session page opens."""
    sessionType: Literal["trial", "premium"] = "trial"
    company: str = ""
    position: str = ""
    resumeId: Optional[int] = None
    language: str = "English"
    simpleEnglish: bool = False
    extraInstructions: str = ""
    aiModel: str = DEFAULT_AI_MODEL


class SessionConfig(BaseModel):
    sessionId: Optional[int] = None
    sessionType: Literal["trial", "premium"] = "trial"
    company: str = ""
    position: str = ""
    resumeId: Optional[int] = None
    resumeData: Optional[dict[str, Any]] = None
    language: str = "English"
    simpleEnglish: bool = False
    extraInstructions: str = ""
    aiModel: str = DEFAULT_AI_MODEL


class AIAnswer(BaseModel):
    answer: str
    confidence: float
    suggestions: List[str] = Field(default_factory=list)
    reasoning: Optional[str] = None


class ConversationEntry(BaseModel):
    question: str
    userAnswer: str
    aiResponse: Optional[AIAnswer] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    processed: bool = False

    @property
    def completed(self) -> bool:
        return self.processed and self.aiResponse is not None


class SessionView(BaseModel):
    """Authoritative in-memory copy of the session page, mirrored to the local cache."""
    session: Optional[SessionConfig] = None
    selectedModel: str = ""
    conversation: List[ConversationEntry] = Field(default_factory=list)
    timeRemaining: int = TRIAL_TIME_BUDGET
    sessionStartTime: Optional[datetime] = None
    previewWidth: int = PREVIEW_DEFAULT_WIDTH
    previewHeight: int = PREVIEW_DEFAULT_HEIGHT
    statusMessage: str = ""
    error: Optional[str] = None

    @property
    def is_trial(self) -> bool:
        return self.session is not None and self.session.sessionType == "trial"
