"""
Resume Pydantic schemas - camelCase wire format used by the frontend
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# --- Nested schemas ---
class PersonalDetails(BaseModel):
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""


class Education(BaseModel):
    school: str = ""
    degree: str = ""
    timeStart: str = ""
    timeEnd: str = ""
    location: str = ""
    description: str = ""


class Experience(BaseModel):
    company: str = ""
    position: str = ""
    timeStart: str = ""
    timeEnd: str = ""
    location: str = ""
    description: str = ""
    achievements: List[str] = Field(default_factory=list)


class OtherExperience(BaseModel):
    title: str = ""
    description: str = ""


class Certification(BaseModel):
    name: str = ""
    issuer: str = ""
    date: str = ""


class Project(BaseModel):
    name: str = ""
    description: str = ""
    technologies: str = ""
    url: str = ""


class ResumeBase(BaseModel):
    title: Optional[str] = Field(default=None, max_length=100)
    personalDetails: Optional[PersonalDetails] = None
    introduction: Optional[str] = Field(default=None, max_length=1000)
    education: Optional[List[Education]] = None
    experience: Optional[List[Experience]] = None
    otherExperience: Optional[List[OtherExperience]] = None
    skills: Optional[List[str]] = None
    languages: Optional[List[str]] = None
    certifications: Optional[List[Certification]] = None
    projects: Optional[List[Project]] = None
    isDefault: Optional[bool] = None
    originalFileName: Optional[str] = None
    parsedFromPdf: Optional[bool] = None


class ResumeCreate(ResumeBase):
    """title, personalDetails.name and personalDetails.email are required (checked by ResumeService)"""


class ResumeUpdate(ResumeBase):
    """Partial update - only fields that were sent are applied"""


class ResumeOut(BaseModel):
    id: int
    userId: int
    title: str
    personalDetails: PersonalDetails
    introduction: str = ""
    education: List[Education] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    otherExperience: List[OtherExperience] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    isDefault: bool = False
    originalFileName: Optional[str] = None
    parsedFromPdf: bool = False
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ResumeEnvelope(BaseModel):
    success: bool = True
    data: ResumeOut


class ResumeListEnvelope(BaseModel):
    success: bool = True
    count: int
    data: List[ResumeOut]


# Wire name -> model column
RESUME_FIELD_COLUMNS: dict[str, str] = {
    "title": "title",
    "personalDetails": "personal_details",
    "introduction": "introduction",
    "education": "education",
    "experience": "experience",
    "otherExperience": "other_experience",
    "skills": "skills",
    "languages": "languages",
    "certifications": "certifications",
    "projects": "projects",
    "isDefault": "is_default",
    "originalFileName": "original_file_name",
    "parsedFromPdf": "parsed_from_pdf",
}


def payload_to_resume_dict(payload: ResumeBase) -> dict:
    """Convert the fields that were actually sent to model column values."""
    data = payload.model_dump(exclude_unset=True)
    return {RESUME_FIELD_COLUMNS[k]: v for k, v in data.items() if k in RESUME_FIELD_COLUMNS}


def resume_model_to_out(resume) -> ResumeOut:
    return ResumeOut(
        id=resume.id,
        userId=resume.user_id,
        title=resume.title or "",
        personalDetails=PersonalDetails(**(resume.personal_details or {})),
        introduction=resume.introduction or "",
        education=[Education(**e) for e in resume.education or []],
        experience=[Experience(**e) for e in resume.experience or []],
        otherExperience=[OtherExperience(**e) for e in resume.other_experience or []],
        skills=list(resume.skills or []),
        languages=list(resume.languages or []),
        certifications=[Certification(**c) for c in resume.certifications or []],
        projects=[Project(**p) for p in resume.projects or []],
        isDefault=bool(resume.is_default),
        originalFileName=resume.original_file_name,
        parsedFromPdf=bool(resume.parsed_from_pdf),
        createdAt=resume.created_at,
        updatedAt=resume.updated_at,
    )
