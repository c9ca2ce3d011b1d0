# app/schemas/college.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.schemas.submission import SubmissionSummary


class CollegeWrite(BaseModel):
    name: str = Field(..., min_length=1)
    location: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None


class CollegeRead(CollegeWrite):
    id: UUID
    created_at: datetime
    candidate_count: int = 0


class CollegeCandidateCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr


class CollegeCandidateRead(BaseModel):
    id: UUID
    college_id: UUID
    name: str
    email: str
    status: Optional[str] = None
    imported_at: datetime
    submissions: List[SubmissionSummary] = []

    class Config:
        from_attributes = True


class CollegeCandidateStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)


class AssessmentStats(BaseModel):
    assessment_title: str
    total_candidates: int
    invitations_sent: int
    submissions_received: int
    completion_percentage: float


class ResetSubmissionRequest(BaseModel):
    assessment_id: UUID
    notify: bool = False
    subject: Optional[str] = None
    body: Optional[str] = None
