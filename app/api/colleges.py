from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.college import (
    AssessmentStats,
    CollegeCandidateCreate,
    CollegeCandidateRead,
    CollegeCandidateStatusUpdate,
    CollegeRead,
    CollegeWrite,
    ResetSubmissionRequest,
)
from app.schemas.common import ApiResponse
from app.services import colleges as college_service
from app.services.notifications import NotificationService, assessment_link, get_notification_service
from app.services.submissions import delete_submission

router = APIRouter(prefix="/colleges", tags=["Colleges"])


# -------------------------------------------------
# Colleges
# -------------------------------------------------

@router.get("", response_model=List[CollegeRead])
def list_colleges(db: Session = Depends(get_db)):
    return college_service.list_colleges(db)


@router.post("", response_model=CollegeRead, status_code=status.HTTP_201_CREATED)
def create_college(payload: CollegeWrite, db: Session = Depends(get_db)):
    college = college_service.create_college(db, payload.model_dump())
    return CollegeRead(id=college.id, created_at=college.created_at, **payload.model_dump())


@router.put("/{college_id}", response_model=ApiResponse)
def update_college(college_id: UUID, payload: CollegeWrite, db: Session = Depends(get_db)):
    college_service.update_college(db, college_id, payload.model_dump())
    return ApiResponse(message="College updated successfully")


@router.delete("/{college_id}", response_model=ApiResponse)
def delete_college(college_id: UUID, db: Session = Depends(get_db)):
    college_service.delete_college(db, college_id)
    return ApiResponse(message="College and its candidates deleted successfully")


@router.get("/{college_id}/stats/{assessment_id}", response_model=AssessmentStats)
def assessment_stats(college_id: UUID, assessment_id: UUID, db: Session = Depends(get_db)):
    return college_service.assessment_stats(db, college_id, assessment_id)


# -------------------------------------------------
# Candidates
# -------------------------------------------------

@router.get("/{college_id}/candidates", response_model=List[CollegeCandidateRead])
def list_candidates(college_id: UUID, db: Session = Depends(get_db)):
    return college_service.list_candidates(db, college_id)


@router.post(
    "/{college_id}/candidates",
    response_model=CollegeCandidateRead,
    status_code=status.HTTP_201_CREATED,
)
def add_candidate(
    college_id: UUID,
    payload: CollegeCandidateCreate,
    db: Session = Depends(get_db),
):
    return college_service.add_candidate(db, college_id, payload.name, payload.email)


@router.post("/{college_id}/candidates/import", response_model=ApiResponse)
def import_candidates(
    college_id: UUID,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    count = college_service.import_candidates(db, college_id, file.file.read())
    return ApiResponse(message=f"{count} candidates have been imported.", data={"imported": count})


@router.get("/{college_id}/candidates/export")
def export_candidates(
    college_id: UUID,
    fields: Optional[List[str]] = Query(None),
    assessment_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    content = college_service.export_candidates(db, college_id, fields, assessment_id)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="college_{college_id}_candidates.csv"'},
    )


@router.patch("/{college_id}/candidates/{candidate_id}/status", response_model=CollegeCandidateRead)
def set_candidate_status(
    college_id: UUID,
    candidate_id: UUID,
    payload: CollegeCandidateStatusUpdate,
    db: Session = Depends(get_db),
):
    return college_service.set_candidate_status(db, college_id, candidate_id, payload.status)


@router.delete("/{college_id}/candidates/{candidate_id}", response_model=ApiResponse)
def delete_candidate(college_id: UUID, candidate_id: UUID, db: Session = Depends(get_db)):
    college_service.delete_candidate(db, college_id, candidate_id)
    return ApiResponse(message="Candidate deleted successfully")


@router.post("/{college_id}/candidates/{candidate_id}/reset", response_model=ApiResponse)
def reset_submission(
    college_id: UUID,
    candidate_id: UUID,
    payload: ResetSubmissionRequest,
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Delete the candidate's submission so they can retake the assessment."""
    candidate = college_service.get_college_candidate(db, college_id, candidate_id)
    deleted = delete_submission(db, payload.assessment_id, candidate.id, college=True)

    if payload.notify:
        assessment = college_service.get_assessment(db, payload.assessment_id)
        notifications.send_reset_notice(
            candidate_name=candidate.name,
            candidate_email=candidate.email,
            assessment_name=assessment.title,
            link=assessment_link(assessment.id, candidate.id, college_id),
            subject=payload.subject or f"Your assessment \"{assessment.title}\" has been reset",
            body=payload.body or "You can now retake the assessment using the link below.",
        )

    return ApiResponse(message="Assessment reset successfully", data={"deleted": deleted})
