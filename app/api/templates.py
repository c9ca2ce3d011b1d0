from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.db.session import get_db
from app.models.email_template import EmailTemplate
from app.schemas.common import ApiResponse
from app.schemas.template import EmailTemplateRead, EmailTemplateWrite

router = APIRouter(prefix="/templates", tags=["Email Templates"])


def _get_template(db: Session, template_id: UUID) -> EmailTemplate:
    template = db.query(EmailTemplate).filter(EmailTemplate.id == template_id).first()
    if not template:
        raise NotFoundError("Template not found")
    return template


@router.get("", response_model=List[EmailTemplateRead])
def list_templates(db: Session = Depends(get_db)):
    return db.query(EmailTemplate).order_by(EmailTemplate.created_at.desc()).all()


@router.get("/{template_id}", response_model=EmailTemplateRead)
def get_template(template_id: UUID, db: Session = Depends(get_db)):
    return _get_template(db, template_id)


@router.post("", response_model=EmailTemplateRead, status_code=status.HTTP_201_CREATED)
def create_template(payload: EmailTemplateWrite, db: Session = Depends(get_db)):
    template = EmailTemplate(**payload.model_dump())
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


@router.put("/{template_id}", response_model=EmailTemplateRead)
def update_template(template_id: UUID, payload: EmailTemplateWrite, db: Session = Depends(get_db)):
    template = _get_template(db, template_id)
    for key, value in payload.model_dump().items():
        setattr(template, key, value)
    db.commit()
    db.refresh(template)
    return template


@router.delete("/{template_id}", response_model=ApiResponse)
def delete_template(template_id: UUID, db: Session = Depends(get_db)):
    db.delete(_get_template(db, template_id))
    db.commit()
    return ApiResponse(message="Template deleted successfully")
