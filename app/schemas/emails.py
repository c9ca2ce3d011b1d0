# app/schemas/emails.py

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class ApplicationEmailRequest(BaseModel):
    """Rejection / shortlist emails."""

    full_name: str = Field(..., min_length=1)
    email: EmailStr
    position: str = Field(..., min_length=1)


class InviteeIn(BaseModel):
    id: UUID
    name: str = Field(..., min_length=1)
    email: EmailStr


class AssessmentInviteRequest(BaseModel):
    candidates: List[InviteeIn] = Field(..., min_length=1)
    assessment_id: UUID
    assessment_title: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    passcode: Optional[str] = None
    college_id: Optional[UUID] = None
    authentication: Literal["none", "email_verification"] = "none"


class ResetAssessmentRequest(BaseModel):
    candidate_name: str = Field(..., min_length=1)
    candidate_email: EmailStr
    assessment_name: str = Field(..., min_length=1)
    assessment_link: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
