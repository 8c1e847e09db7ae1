"""
Interview session endpoints - session lifecycle and question log
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from interviewai.app.core.dependencies import get_current_user, get_db
from interviewai.app.models.user import User
from interviewai.app.schemas.interview_session import (
    QuestionCreate,
    QuestionListEnvelope,
    SessionComplete,
    SessionCreate,
    SessionEnvelope,
    SessionListEnvelope,
    SessionUpdate,
    question_model_to_out,
    session_model_to_out,
)
from interviewai.app.schemas.user import MessageResponse
from interviewai.app.services.session_service import SessionService

router = APIRouter()


@router.get("", response_model=SessionListEnvelope)
@router.get("/user", response_model=SessionListEnvelope)
def list_sessions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the current user's sessions, newest first. `/user` is an alias."""
    sessions = SessionService.list_sessions(db, current_user)
    return SessionListEnvelope(count=len(sessions), data=[session_model_to_out(s) for s in sessions])


@router.post("", response_model=SessionEnvelope, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: SessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Create a session when the wizard completes.

    - **sessionType**: trial (no credits, time-boxed) or premium (1 credit)
    - **company** / **position**: required
    - **resumeId**: optional, must be one of the user's resumes
    """
    session = SessionService.create_session(db, current_user, payload)
    return SessionEnvelope(data=session_model_to_out(session))


@router.get("/{session_id}", response_model=SessionEnvelope)
def get_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return SessionEnvelope(data=session_model_to_out(SessionService.get_session(db, current_user, session_id)))


@router.put("/{session_id}", response_model=SessionEnvelope)
def update_session(
    session_id: int,
    patch: SessionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Append a question, change status, or record feedback/rating."""
    session = SessionService.update_session(db, current_user, session_id, patch)
    return SessionEnvelope(data=session_model_to_out(session))


@router.delete("/{session_id}", response_model=MessageResponse)
def delete_session(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    SessionService.delete_session(db, current_user, session_id)
    return MessageResponse(message="Session deleted successfully")


@router.post("/{session_id}/questions", response_model=SessionEnvelope)
def add_question(
    session_id: int,
    payload: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Append one question/answer pair. Confidence defaults to 0.8."""
    session = SessionService.append_question(
        db, current_user, session_id, payload.question, payload.answer, payload.confidence
    )
    return SessionEnvelope(data=session_model_to_out(session))


@router.get("/{session_id}/questions", response_model=QuestionListEnvelope)
def list_questions(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    questions = SessionService.list_questions(db, current_user, session_id)
    return QuestionListEnvelope(count=len(questions), data=[question_model_to_out(q) for q in questions])


@router.put("/{session_id}/complete", response_model=SessionEnvelope)
def complete_session(
    session_id: int,
    payload: SessionComplete,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Finish the session: status (default completed), endTime (default now), duration from elapsed time."""
    session = SessionService.complete_session(db, current_user, session_id, payload)
    return SessionEnvelope(data=session_model_to_out(session))
