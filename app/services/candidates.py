# app/services/candidates.py

import logging
import uuid

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, StorageError
from app.models.candidate import Candidate
from app.storage.object_store import LocalObjectStore

logger = logging.getLogger(__name__)


def delete_candidate(db: Session, store: LocalObjectStore, candidate_id: uuid.UUID) -> None:
    """
    Delete an application and its stored resume.

    The database row is the primary record: a resume that cannot be removed
    from storage is logged and does not fail the delete.
    """
    candidate = db.query(Candidate).filter(Candidate.id == candidate_id).first()
    if not candidate:
        raise NotFoundError("Candidate not found.")

    resume_url = candidate.resume_url
    db.delete(candidate)
    db.commit()

    if resume_url:
        try:
            store.delete_by_url(resume_url)
        except StorageError as exc:
            logger.warning("Failed to delete resume from storage: %s", exc.message)
