# app/schemas/assessment.py

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

QuestionType = Literal["text", "multiple-choice", "checkbox", "file-upload", "date"]
AuthenticationType = Literal["none", "email_verification"]

CHOICE_TYPES = ("multiple-choice", "checkbox")


class Question(BaseModel):
    id: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    type: QuestionType = "text"
    options: Optional[List[str]] = None
    is_required: bool = False

    # Grading (staff only, stripped from the candidate view)
    points: Optional[float] = None
    correct_answer: Optional[Union[str, List[str]]] = None

    @model_validator(mode="after")
    def check_options(self):
        if self.type in CHOICE_TYPES and (not self.options or len(self.options) < 2):
            raise ValueError("This question type must have at least 2 options.")
        if self.options and any(not o.strip() for o in self.options):
            raise ValueError("Option cannot be empty")
        return self


class Section(BaseModel):
    id: str
    title: str
    questions: List[Question] = []


class AssessmentBase(BaseModel):
    title: str = Field(..., min_length=1)
    passcode: Optional[str] = None
    time_limit: Optional[int] = Field(None, ge=0)
    authentication: AuthenticationType = "none"
    disable_copy_paste: bool = False
    should_auto_grade: bool = False

    start_page_title: Optional[str] = None
    start_page_instructions: Optional[str] = None
    start_button_text: Optional[str] = None
    success_title: Optional[str] = None
    success_message: Optional[str] = None


# =========================
# Staff create / update
# =========================
class AssessmentWrite(AssessmentBase):
    sections: List[Section] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_sections(self):
        seen = set()
        for section in self.sections:
            if not section.title.strip():
                raise ValueError("Section title cannot be empty")
            if not section.questions:
                raise ValueError("At least one question is required per section")
            # Answers are keyed by question id across the whole assessment
            for question in section.questions:
                if question.id in seen:
                    raise ValueError(f"Duplicate question id: {question.id}")
                seen.add(question.id)
        return self


# =========================
# Loaded document (normalized)
# =========================
class AssessmentDocument(AssessmentBase):
    id: str
    sections: List[Section] = []
    created_at: Optional[datetime] = None

    def all_questions(self) -> List[Question]:
        return [q for section in self.sections for q in section.questions]

    def public_view(self) -> dict:
        """Candidate-safe rendering: no passcode, no answers, no points."""
        data = self.model_dump(exclude={"passcode", "should_auto_grade"})
        for section in data["sections"]:
            for question in section["questions"]:
                question.pop("correct_answer", None)
                question.pop("points", None)
        data["requires_passcode"] = bool(self.passcode)
        return data
