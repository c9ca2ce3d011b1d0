# app/schemas/job.py

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

JobStatus = Literal["Open", "Closed"]
JobType = Literal["full-time", "internship"]


class JobBase(BaseModel):
    position: str = Field(..., min_length=1)
    description: str = ""
    icon: str = "Briefcase"
    openings: int = Field(1, ge=0)
    experience: str = ""
    location: str = ""
    highlight_points: List[str] = []
    responsibilities: List[str] = []
    skills: List[str] = []
    status: JobStatus = "Open"
    type: JobType = "full-time"


class JobCreate(JobBase):
    pass


class JobUpdate(BaseModel):
    id: UUID
    position: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    openings: Optional[int] = Field(None, ge=0)
    experience: Optional[str] = None
    location: Optional[str] = None
    highlight_points: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    status: Optional[JobStatus] = None
    type: Optional[JobType] = None


class JobRead(JobBase):
    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
