"""
Interview session service - the server-side session store.

Lifecycle: sessions are created ``active`` and move once to a terminal
status (``completed`` or ``cancelled``). Questions can only be appended
while the session is active. Duration is derived from start/end time by
the model hook in ``models.interview_session``.
"""
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from interviewai.app.core.config import (
    DEFAULT_AI_MODEL,
    DEFAULT_QUESTION_CONFIDENCE,
    PREMIUM_SESSION_CREDITS,
    SESSION_STATUSES,
    TERMINAL_STATUSES,
    TITLE_MAX_LENGTH,
)
from interviewai.app.core.exceptions import InvalidStateTransition, NotFound, ValidationError
from interviewai.app.core.logging_config import get_logger
from interviewai.app.models.interview_session import InterviewSession, SessionQuestion
from interviewai.app.models.user import User
from interviewai.app.schemas.interview_session import SessionComplete, SessionCreate, SessionUpdate
from interviewai.app.services.resume_service import ResumeService

logger = get_logger("services.session")


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _required_text(value: str | None, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"Please provide {label}")
    if len(text) > TITLE_MAX_LENGTH:
        raise ValidationError(f"{label.capitalize()} cannot be more than {TITLE_MAX_LENGTH} characters")
    return text


def _check_transition(session: InterviewSession, new_status: str) -> None:
    if new_status not in SESSION_STATUSES:
        raise ValidationError(f"Invalid status: {new_status}. Use: {', '.join(SESSION_STATUSES)}")
    if session.status in TERMINAL_STATUSES:
        raise InvalidStateTransition(
            f"Session is already {session.status}; it cannot move to {new_status}"
        )
    if new_status not in TERMINAL_STATUSES:
        raise InvalidStateTransition(f"Session is already {session.status}")


def _finish(session: InterviewSession, status: str, end_time: datetime | None, duration: int | None) -> None:
    _check_transition(session, status)
    end = _to_naive_utc(end_time) if end_time else datetime.utcnow()
    if end < session.start_time:
        raise ValidationError("End time cannot be before the session start time")
    session.status = status
    session.end_time = end
    if duration is not None:
        # Overwritten by the elapsed-time hook on flush
        session.duration = duration


class SessionService:
    @staticmethod
    def create_session(db: Session, user: User, payload: SessionCreate) -> InterviewSession:
        company = _required_text(payload.company, "company name")
        position = _required_text(payload.position, "position title")
        if payload.resumeId is not None:
            ResumeService.get_resume(db, user, payload.resumeId)

        metadata = {
            "resumeId": payload.resumeId,
            "language": (payload.language or "").strip() or "English",
            "simpleEnglish": bool(payload.simpleEnglish),
            "extraInstructions": (payload.extraInstructions or "").strip(),
            "aiModel": (payload.aiModel or "").strip() or DEFAULT_AI_MODEL,
            "createdFromFlow": bool(payload.createdFromFlow),
        }
        session = InterviewSession(
            user_id=user.id,
            session_type=payload.sessionType,
            company=company,
            position=position,
            status="active",
            start_time=datetime.utcnow(),
            credits_used=0 if payload.sessionType == "trial" else PREMIUM_SESSION_CREDITS,
            session_metadata=metadata,
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        logger.info(
            "Session created user_id=%s session_id=%s type=%s",
            user.id,
            session.id,
            session.session_type,
        )
        return session

    @staticmethod
    def list_sessions(db: Session, user: User) -> list[InterviewSession]:
        return (
            db.query(InterviewSession)
            .filter(InterviewSession.user_id == user.id)
            .order_by(InterviewSession.created_at.desc(), InterviewSession.id.desc())
            .all()
        )

    @staticmethod
    def get_session(db: Session, user: User, session_id: int) -> InterviewSession:
        session = (
            db.query(InterviewSession)
            .filter(InterviewSession.id == session_id, InterviewSession.user_id == user.id)
            .first()
        )
        if not session:
            raise NotFound("Interview session not found")
        return session

    @staticmethod
    def list_questions(db: Session, user: User, session_id: int) -> list[SessionQuestion]:
        return list(SessionService.get_session(db, user, session_id).questions)

    @staticmethod
    def append_question(
        db: Session,
        user: User,
        session_id: int,
        question: str | None,
        answer: str | None,
        confidence: float | None = None,
    ) -> InterviewSession:
        session = SessionService.get_session(db, user, session_id)
        question_text = (question or "").strip()
        answer_text = (answer or "").strip()
        if not question_text or not answer_text:
            raise ValidationError("Please provide question and answer")
        if session.status != "active":
            raise InvalidStateTransition(f"Cannot add questions to a {session.status} session")

        session.questions.append(
            SessionQuestion(
                question=question_text,
                answer=answer_text,
                timestamp=datetime.utcnow(),
                confidence=DEFAULT_QUESTION_CONFIDENCE if confidence is None else confidence,
            )
        )
        db.commit()
        db.refresh(session)
        logger.info(
            "Question appended session_id=%s count=%d", session.id, len(session.questions)
        )
        return session

    @staticmethod
    def complete_session(db: Session, user: User, session_id: int, payload: SessionComplete) -> InterviewSession:
        session = SessionService.get_session(db, user, session_id)
        _finish(session, payload.status or "completed", payload.endTime, payload.duration)
        db.commit()
        db.refresh(session)
        logger.info(
            "Session finished session_id=%s status=%s duration=%s",
            session.id,
            session.status,
            session.duration,
        )
        return session

    @staticmethod
    def update_session(db: Session, user: User, session_id: int, patch: SessionUpdate) -> InterviewSession:
        """Generic merge: question append, status transition, feedback, rating."""
        session = SessionService.get_session(db, user, session_id)
        if patch.question is not None or patch.answer is not None:
            session = SessionService.append_question(
                db, user, session_id, patch.question, patch.answer, patch.confidence
            )
        if patch.status is not None and patch.status != "active":
            _finish(session, patch.status, None, None)
        elif patch.status == "active" and session.status != "active":
            _check_transition(session, patch.status)
        if patch.feedback is not None:
            session.feedback = patch.feedback.strip()
        if patch.rating is not None:
            session.rating = patch.rating
        db.commit()
        db.refresh(session)
        return session

    @staticmethod
    def delete_session(db: Session, user: User, session_id: int) -> None:
        session = SessionService.get_session(db, user, session_id)
        db.delete(session)
        db.commit()
        logger.info("Session deleted user_id=%s session_id=%s", user.id, session_id)
