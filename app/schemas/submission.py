# app/schemas/submission.py

from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field


class SubmittedAnswer(BaseModel):
    question_id: str
    question_text: str
    answer: Optional[Union[str, List[str]]] = None
    points: Optional[float] = None
    is_correct: Optional[bool] = None


class SubmissionSummary(BaseModel):
    id: UUID
    assessment_id: UUID
    assessment_title: str
    score: Optional[float] = None
    max_score: Optional[float] = None
    submitted_at: datetime

    class Config:
        from_attributes = True


class SubmissionRead(SubmissionSummary):
    candidate_name: str
    candidate_email: str
    answers: List[SubmittedAnswer]
    time_taken: int
    college_id: Optional[UUID] = None
    candidate_id: Optional[UUID] = None
    college_candidate_id: Optional[UUID] = None


class ManualGrades(BaseModel):
    """Reviewer points per question id."""

    points: Dict[str, float] = Field(..., min_length=1)


class SubmissionResponse(BaseModel):
    """Response after successful submission"""

    message: str
    submission_id: Optional[str] = None
    success_title: Optional[str] = None
    success_message: Optional[str] = None
    status: str = "finished"


class RegradeResult(BaseModel):
    updated: int
    details: Dict[str, Any] = {}
