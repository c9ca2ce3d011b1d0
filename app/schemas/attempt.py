# app/schemas/attempt.py

from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class AttemptStartRequest(BaseModel):
    assessment_id: UUID
    candidate_id: Optional[UUID] = None
    college_id: Optional[UUID] = None


class PasscodeRequest(BaseModel):
    passcode: str = Field(..., min_length=1)


class VerificationRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr


class AnswerRequest(BaseModel):
    answer: Union[str, List[str]]
