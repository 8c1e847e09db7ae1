"""
Resume service - owner-scoped resume CRUD and the single-default invariant.
Used by /api/resumes and by session creation (resume ownership check).
"""
from sqlalchemy.orm import Session

from interviewai.app.core.exceptions import NotFound, ValidationError
from interviewai.app.core.logging_config import get_logger
from interviewai.app.models.resume import Resume
from interviewai.app.models.user import User
from interviewai.app.schemas.resume import ResumeCreate, ResumeUpdate, payload_to_resume_dict

logger = get_logger("services.resume")


def _lock_owner(db: Session, user_id: int) -> None:
    """Serialize default-flag writes per owner (row lock on dialects that support it)."""
    db.query(User.id).filter(User.id == user_id).with_for_update().first()


def _clear_other_defaults(db: Session, user_id: int, keep_id: int | None) -> None:
    query = db.query(Resume).filter(Resume.user_id == user_id, Resume.is_default.is_(True))
    if keep_id is not None:
        query = query.filter(Resume.id != keep_id)
    query.update({Resume.is_default: False}, synchronize_session="fetch")
    db.flush()


class ResumeService:
    @staticmethod
    def list_resumes(db: Session, user: User) -> list[Resume]:
        """User's resumes, newest first"""
        return (
            db.query(Resume)
            .filter(Resume.user_id == user.id)
            .order_by(Resume.created_at.desc(), Resume.id.desc())
            .all()
        )

    @staticmethod
    def get_resume(db: Session, user: User, resume_id: int) -> Resume:
        resume = db.query(Resume).filter(Resume.id == resume_id, Resume.user_id == user.id).first()
        if not resume:
            raise NotFound("Resume not found")
        return resume

    @staticmethod
    def create_resume(db: Session, user: User, payload: ResumeCreate) -> Resume:
        details = payload.personalDetails
        if not (payload.title or "").strip() or not details or not details.name.strip() or not details.email.strip():
            raise ValidationError("Please provide title and personal details (name, email)")

        data = payload_to_resume_dict(payload)
        data["title"] = data["title"].strip()
        make_default = bool(data.pop("is_default", False))
        try:
            if make_default:
                _lock_owner(db, user.id)
                _clear_other_defaults(db, user.id, keep_id=None)
            resume = Resume(user_id=user.id, is_default=make_default, **data)
            db.add(resume)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(resume)
        logger.info("Resume created user_id=%s resume_id=%s default=%s", user.id, resume.id, make_default)
        return resume

    @staticmethod
    def update_resume(db: Session, user: User, resume_id: int, payload: ResumeUpdate) -> Resume:
        resume = ResumeService.get_resume(db, user, resume_id)
        data = payload_to_resume_dict(payload)
        if "title" in data and not (data["title"] or "").strip():
            raise ValidationError("Please provide a resume title")
        if "personal_details" in data:
            details = data["personal_details"] or {}
            if not details.get("name", "").strip() or not details.get("email", "").strip():
                raise ValidationError("Please provide personal details (name, email)")

        make_default = data.pop("is_default", None)
        try:
            if make_default:
                _lock_owner(db, user.id)
                _clear_other_defaults(db, user.id, keep_id=resume.id)
            for key, value in data.items():
                setattr(resume, key, value)
            if make_default is not None:
                resume.is_default = bool(make_default)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(resume)
        return resume

    @staticmethod
    def set_default(db: Session, user: User, resume_id: int) -> Resume:
        """Mark one resume as default and clear the flag on all others, in one transaction."""
        try:
            _lock_owner(db, user.id)
            resume = ResumeService.get_resume(db, user, resume_id)
            _clear_other_defaults(db, user.id, keep_id=resume.id)
            resume.is_default = True
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(resume)
        logger.info("Default resume set user_id=%s resume_id=%s", user.id, resume.id)
        return resume

    @staticmethod
    def delete_resume(db: Session, user: User, resume_id: int) -> None:
        resume = ResumeService.get_resume(db, user, resume_id)
        db.delete(resume)
        db.commit()
        logger.info("Resume deleted user_id=%s resume_id=%s", user.id, resume_id)
