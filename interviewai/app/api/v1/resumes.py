"""
Resume endpoints - owner-scoped CRUD and default selection
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from interviewai.app.core.dependencies import get_current_user, get_db
from interviewai.app.models.user import User
from interviewai.app.schemas.resume import (
    ResumeCreate,
    ResumeEnvelope,
    ResumeListEnvelope,
    ResumeUpdate,
    resume_model_to_out,
)
from interviewai.app.schemas.user import MessageResponse
from interviewai.app.services.resume_service import ResumeService

router = APIRouter()


@router.get("", response_model=ResumeListEnvelope)
def list_resumes(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List the current user's resumes, newest first."""
    resumes = ResumeService.list_resumes(db, current_user)
    return ResumeListEnvelope(count=len(resumes), data=[resume_model_to_out(r) for r in resumes])


@router.post("", response_model=ResumeEnvelope, status_code=status.HTTP_201_CREATED)
def create_resume(
    payload: ResumeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a resume. Requires title and personalDetails.name / personalDetails.email."""
    resume = ResumeService.create_resume(db, current_user, payload)
    return ResumeEnvelope(data=resume_model_to_out(resume))


@router.get("/{resume_id}", response_model=ResumeEnvelope)
def get_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ResumeEnvelope(data=resume_model_to_out(ResumeService.get_resume(db, current_user, resume_id)))


@router.put("/{resume_id}", response_model=ResumeEnvelope)
def update_resume(
    resume_id: int,
    payload: ResumeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partial update (form autosave). Setting isDefault clears it on the user's other resumes."""
    resume = ResumeService.update_resume(db, current_user, resume_id, payload)
    return ResumeEnvelope(data=resume_model_to_out(resume))


@router.delete("/{resume_id}", response_model=MessageResponse)
def delete_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ResumeService.delete_resume(db, current_user, resume_id)
    return MessageResponse(message="Resume deleted successfully")


@router.put("/{resume_id}/default", response_model=ResumeEnvelope)
def set_default_resume(
    resume_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Make this the user's only default resume."""
    resume = ResumeService.set_default(db, current_user, resume_id)
    return ResumeEnvelope(data=resume_model_to_out(resume))
