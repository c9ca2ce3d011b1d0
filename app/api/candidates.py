import os
import time
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationFailed
from app.db.session import get_db
from app.models.candidate import Candidate
from app.schemas.candidate import (
    CandidateCreate,
    CandidateDeleteRequest,
    CandidateRead,
    CandidateStatusUpdate,
)
from app.schemas.common import ApiResponse
from app.services.candidates import delete_candidate
from app.storage.object_store import LocalObjectStore, get_object_store

router = APIRouter(prefix="/candidate", tags=["Candidates"])

RESUME_ROOT = "resumes"


def _get_candidate(db: Session, candidate_id: UUID) -> Candidate:
    candidate = db.query(Candidate).filter(Candidate.id == candidate_id).first()
    if not candidate:
        raise NotFoundError("Candidate not found.")
    return candidate


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_candidate(payload: CandidateCreate, db: Session = Depends(get_db)):
    candidate = Candidate(**payload.model_dump())
    db.add(candidate)
    db.commit()
    db.refresh(candidate)
    return ApiResponse(message="Application submitted successfully", data={"id": str(candidate.id)})


@router.post("/resume", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def upload_resume(
    file: UploadFile = File(...),
    store: LocalObjectStore = Depends(get_object_store),
):
    if not file.filename:
        raise ValidationFailed("A resume file is required.", field="file")

    safe_name = os.path.basename(file.filename.replace("\\", "/")) or "resume"
    key = f"{RESUME_ROOT}/{int(time.time() * 1000)}-{safe_name}"
    store.upload(key, file.file)
    return ApiResponse(message="Resume uploaded", data={"url": store.public_url(key)})


@router.get("", response_model=List[CandidateRead])
def list_candidates(
    type: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    query = db.query(Candidate)
    if type:
        query = query.filter(Candidate.type == type)
    if status_filter:
        query = query.filter(Candidate.status == status_filter)
    return query.order_by(Candidate.submitted_at.desc()).all()


@router.get("/{candidate_id}", response_model=CandidateRead)
def get_candidate(candidate_id: UUID, db: Session = Depends(get_db)):
    return _get_candidate(db, candidate_id)


@router.patch("/{candidate_id}/status", response_model=CandidateRead)
def update_status(
    candidate_id: UUID,
    payload: CandidateStatusUpdate,
    db: Session = Depends(get_db),
):
    candidate = _get_candidate(db, candidate_id)
    candidate.status = payload.status
    candidate.rejection_reason = payload.rejection_reason if payload.status == "Rejected" else None
    if payload.comments is not None:
        candidate.comments = payload.comments
    db.commit()
    db.refresh(candidate)
    return candidate


@router.post("/delete", response_model=ApiResponse)
def delete_candidate_by_body(
    payload: CandidateDeleteRequest,
    db: Session = Depends(get_db),
    store: LocalObjectStore = Depends(get_object_store),
):
    delete_candidate(db, store, payload.id)
    return ApiResponse(message="Candidate deleted successfully.")


@router.delete("/{candidate_id}", response_model=ApiResponse)
def delete_candidate_by_id(
    candidate_id: UUID,
    db: Session = Depends(get_db),
    store: LocalObjectStore = Depends(get_object_store),
):
    delete_candidate(db, store, candidate_id)
    return ApiResponse(message="Candidate deleted successfully.")
