# app/engine/sections.py

"""
Section layout of an assessment.

Candidates answer into ONE flat answer array that covers every question of
every section, so anything addressing that array goes through
``overall_question_index``.
"""

from typing import Any, Dict, List, Optional, Sequence

from app.schemas.assessment import AssessmentDocument

DEFAULT_SECTION_ID = "default"
DEFAULT_SECTION_TITLE = "General Questions"


def normalize_sections(
    sections: Optional[List[Dict[str, Any]]],
    questions: Optional[List[Dict[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """
    Return the section list of a stored assessment.

    Legacy documents have top-level ``questions`` and no ``sections``; they
    are wrapped into a single implicit "General Questions" section.
    """
    if sections:
        return list(sections)
    if questions:
        return [{
            "id": DEFAULT_SECTION_ID,
            "title": DEFAULT_SECTION_TITLE,
            "questions": list(questions),
        }]
    return []


def load_assessment(row) -> AssessmentDocument:
    """Build the normalized document for an ``Assessment`` row."""
    return AssessmentDocument(
        id=str(row.id),
        title=row.title,
        passcode=row.passcode or None,
        time_limit=row.time_limit,
        authentication=row.authentication or "none",
        disable_copy_paste=bool(row.disable_copy_paste),
        should_auto_grade=bool(row.should_auto_grade),
        sections=normalize_sections(row.sections, row.questions),
        start_page_title=row.start_page_title,
        start_page_instructions=row.start_page_instructions,
        start_button_text=row.start_button_text,
        success_title=row.success_title,
        success_message=row.success_message,
        created_at=row.created_at,
    )


def question_counts(document: AssessmentDocument) -> List[int]:
    return [len(section.questions) for section in document.sections]


def overall_question_index(
    counts: Sequence[int],
    section_index: int,
    question_index: int,
) -> int:
    """
    Offset of a question in the flat answer array.

    Equals the sum of the question counts of all prior sections plus the
    in-section index. Counts ``[2, 3]`` put the 2nd question of the 2nd
    section at index 3.
    """
    if not 0 <= section_index < len(counts):
        raise ValueError(f"Section index {section_index} out of range")
    if not 0 <= question_index < counts[section_index]:
        raise ValueError(
            f"Question index {question_index} out of range for section {section_index}"
        )
    return sum(counts[:section_index]) + question_index
