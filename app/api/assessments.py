from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import get_db
from app.engine.sections import load_assessment
from app.models.assessment import Assessment
from app.models.submission import AssessmentInvitation, AssessmentSubmission
from app.schemas.assessment import AssessmentDocument, AssessmentWrite
from app.schemas.common import ApiResponse

router = APIRouter(prefix="/assessments", tags=["Assessments"])


def _get_assessment(db: Session, assessment_id: UUID) -> Assessment:
    row = db.query(Assessment).filter(Assessment.id == assessment_id).first()
    if not row:
        raise NotFoundError("Assessment not found.")
    return row


def _apply(row: Assessment, payload: AssessmentWrite) -> None:
    data = payload.model_dump()
    for key, value in data.items():
        setattr(row, key, value)
    # Saving always writes the sectioned layout
    row.questions = None
    row.passcode = payload.passcode or None


# -------------------------------------------------
# Staff
# -------------------------------------------------

@router.get("", response_model=List[AssessmentDocument])
def list_assessments(db: Session = Depends(get_db)):
    rows = db.query(Assessment).order_by(Assessment.created_at.desc()).all()
    return [load_assessment(row) for row in rows]


@router.get("/{assessment_id}", response_model=AssessmentDocument)
def get_assessment(assessment_id: UUID, db: Session = Depends(get_db)):
    return load_assessment(_get_assessment(db, assessment_id))


@router.post("", response_model=AssessmentDocument, status_code=status.HTTP_201_CREATED)
def create_assessment(payload: AssessmentWrite, db: Session = Depends(get_db)):
    row = Assessment()
    _apply(row, payload)
    db.add(row)
    db.commit()
    db.refresh(row)
    return load_assessment(row)


@router.put("/{assessment_id}", response_model=AssessmentDocument)
def update_assessment(
    assessment_id: UUID,
    payload: AssessmentWrite,
    db: Session = Depends(get_db),
):
    row = _get_assessment(db, assessment_id)
    _apply(row, payload)
    db.commit()
    db.refresh(row)
    return load_assessment(row)


@router.delete("/{assessment_id}", response_model=ApiResponse)
def delete_assessment(assessment_id: UUID, db: Session = Depends(get_db)):
    row = _get_assessment(db, assessment_id)
    db.query(AssessmentSubmission).filter(AssessmentSubmission.assessment_id == row.id).delete(synchronize_session=False)
    db.query(AssessmentInvitation).filter(AssessmentInvitation.assessment_id == row.id).delete(synchronize_session=False)
    db.delete(row)
    db.commit()
    return ApiResponse(message="Assessment deleted successfully")


# -------------------------------------------------
# Candidate view
# -------------------------------------------------

@router.get("/{assessment_id}/public")
def get_public_assessment(assessment_id: UUID, db: Session = Depends(get_db)):
    """Normalized assessment without passcode, answers or points."""
    return load_assessment(_get_assessment(db, assessment_id)).public_view()
