# app/schemas/candidate.py

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

CandidateStatus = Literal[
    "Applied",
    "Shortlisted",
    "First Round",
    "Second Round",
    "Third Round",
    "Final Round",
    "Hired",
    "Rejected",
]
CandidateType = Literal["internship", "full-time"]


class CandidateCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    contact_number: str = ""
    whatsapp_number: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    education: str = ""
    experience: str = ""
    work_experience: Optional[str] = None
    position: str = Field(..., min_length=1)
    portfolio: str = ""
    resume_url: Optional[str] = None
    avatar: Optional[str] = None
    type: CandidateType = "full-time"
    introduction_video_intern: Optional[str] = None


class CandidateStatusUpdate(BaseModel):
    status: CandidateStatus
    rejection_reason: Optional[str] = None
    comments: Optional[str] = None


class CandidateDeleteRequest(BaseModel):
    id: UUID


class CandidateRead(CandidateCreate):
    id: UUID
    status: str
    rejection_reason: Optional[str] = None
    comments: Optional[str] = None
    submitted_at: datetime

    class Config:
        from_attributes = True
