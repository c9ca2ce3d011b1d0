# app/schemas/ai.py

from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


# =========================
# Resume extraction
# =========================
class ResumeData(BaseModel):
    full_name: str = Field(..., description="The full name of the candidate.")
    email: EmailStr = Field(..., description="The email address of the candidate.")
    phone: str = Field("", description="The phone number of the candidate.")
    location: str = Field("", description="The location of the candidate, including city and state.")
    address: str = Field("", description="The full mailing address of the candidate.")
    education: str = Field("", description="The education details of the candidate.")
    experience: str = Field("", description="The work or internship experience of the candidate.")


# =========================
# Job description sections
# =========================
class JobSection(BaseModel):
    title: str = Field(..., description="Heading of the section, e.g. 'Responsibilities'.")
    points: List[str] = Field(default_factory=list, description="Bullet points under that heading.")


class JobDescriptionData(BaseModel):
    highlight_points: Optional[List[str]] = Field(None, description="Bullet points from a 'Highlights' section.")
    sections: List[JobSection]


class IconSuggestion(BaseModel):
    icon_name: str = Field(..., description="Lucide icon name, e.g. 'Briefcase', 'Code', 'PenTool'.")


# =========================
# Requests
# =========================
class JobDescriptionRequest(BaseModel):
    job_description: str = Field(..., min_length=1)


class IconRequest(BaseModel):
    job_title: str = Field(..., min_length=1)
