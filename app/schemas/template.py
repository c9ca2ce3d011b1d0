from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class EmailTemplateWrite(BaseModel):
    name: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class EmailTemplateRead(EmailTemplateWrite):
    id: UUID
    created_at: datetime

    class Config:
        from_attributes = True
