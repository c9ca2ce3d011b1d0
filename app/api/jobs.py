from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import get_db
from app.models.job import Job
from app.schemas.common import ApiResponse
from app.schemas.job import JobCreate, JobRead, JobUpdate

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _get_job(db: Session, job_id: UUID) -> Job:
    job = db.query(Job).filter(Job.id == job_id).first()
    if not job:
        raise NotFoundError("Job not found")
    return job


@router.get("", response_model=List[JobRead])
def list_jobs(db: Session = Depends(get_db)):
    return db.query(Job).order_by(Job.created_at.desc()).all()


@router.get("/{job_id}", response_model=JobRead)
def get_job(job_id: UUID, db: Session = Depends(get_db)):
    return _get_job(db, job_id)


@router.post("", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def create_job(payload: JobCreate, db: Session = Depends(get_db)):
    job = Job(**payload.model_dump())
    db.add(job)
    db.commit()
    db.refresh(job)
    return ApiResponse(message="Job added successfully", data={"id": str(job.id)})


@router.put("", response_model=ApiResponse)
def update_job(payload: JobUpdate, db: Session = Depends(get_db)):
    job = _get_job(db, payload.id)
    for key, value in payload.model_dump(exclude={"id"}, exclude_unset=True).items():
        setattr(job, key, value)
    db.commit()
    return ApiResponse(message="Job updated successfully")


@router.delete("/{job_id}", response_model=ApiResponse)
def delete_job(job_id: UUID, db: Session = Depends(get_db)):
    db.delete(_get_job(db, job_id))
    db.commit()
    return ApiResponse(message="Job deleted successfully")
