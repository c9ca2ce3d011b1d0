import os
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse, Response
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.submission import ManualGrades, RegradeResult, SubmissionRead
from app.services import submissions as submission_service

router = APIRouter(prefix="/submissions", tags=["Submissions"])

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@router.get("", response_model=List[SubmissionRead])
def list_submissions(
    assessment_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    return submission_service.list_submissions(db, assessment_id)


@router.get("/export/{assessment_id}")
def export_submissions(
    assessment_id: UUID,
    fields: Optional[List[str]] = Query(None),
    db: Session = Depends(get_db),
):
    content = submission_service.export_csv(db, assessment_id, fields)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="submissions_{assessment_id}.csv"'},
    )


@router.post("/regrade/{assessment_id}", response_model=RegradeResult)
def regrade(assessment_id: UUID, db: Session = Depends(get_db)):
    return submission_service.regrade_assessment(db, assessment_id)


@router.get("/{submission_id}", response_model=SubmissionRead)
def get_submission(submission_id: UUID, db: Session = Depends(get_db)):
    return submission_service.get_submission(db, submission_id)


@router.patch("/{submission_id}/grades", response_model=SubmissionRead)
def apply_grades(
    submission_id: UUID,
    payload: ManualGrades,
    db: Session = Depends(get_db),
):
    return submission_service.apply_grades(db, submission_id, payload.points)


@router.get("/{submission_id}/report")
def get_or_download_report(
    submission_id: UUID,
    download: bool = Query(False, description="Set true to download report"),
    db: Session = Depends(get_db),
):
    if not download:
        return submission_service.build_report(db, submission_id)

    file_path = submission_service.write_report_docx(db, submission_id)
    return FileResponse(
        path=file_path,
        filename=os.path.basename(file_path),
        media_type=DOCX_MEDIA_TYPE,
    )
