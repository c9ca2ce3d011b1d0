# app/services/attempts.py

"""
Wires the attempt state machine to the database and object store.

The registry holds live ``AttemptSession`` objects; this service loads what
they need (normalized assessment, invited candidate) and gives each one a
writer that persists its single submission.
"""

import logging
import uuid
from typing import Any, BinaryIO, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AlreadySubmitted, NotFoundError, SubmissionError
from app.engine.attempt import AttemptRegistry, AttemptSession
from app.engine.gate import CandidateContext
from app.engine.grader import grade_answers
from app.engine.sections import load_assessment
from app.engine.submission import Linkage, SubmissionWriter
from app.models.assessment import Assessment
from app.models.candidate import Candidate
from app.models.college import CollegeCandidate
from app.models.submission import AssessmentSubmission
from app.schemas.assessment import AssessmentDocument
from app.schemas.attempt import AttemptStartRequest
from app.storage.object_store import LocalObjectStore

logger = logging.getLogger(__name__)


def _uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    return uuid.UUID(value) if value else None


def make_submission_writer(
    session_factory: Callable[[], Session],
    document: AssessmentDocument,
) -> SubmissionWriter:
    """
    Grade and insert one submission row per call.

    A linked candidate who already has a submission for the assessment (for
    instance from a second open attempt) is refused with ``AlreadySubmitted``.
    The unique constraints on ``assessment_submissions`` catch the race
    between two concurrent writes.
    """

    def write(payload: Dict[str, Any]) -> str:
        graded = grade_answers(payload["answers"], document.all_questions())
        submission_id = uuid.uuid4()
        assessment_id = uuid.UUID(payload["assessment_id"])
        college_id = _uuid(payload["college_id"])
        linked_id = _uuid(payload["college_candidate_id"] or payload["candidate_id"])

        db = session_factory()
        try:
            if linked_id and has_submitted(db, assessment_id, linked_id, college_id):
                raise AlreadySubmitted("You have already submitted this assessment.")

            db.add(AssessmentSubmission(
                id=submission_id,
                assessment_id=assessment_id,
                assessment_title=payload["assessment_title"],
                candidate_name=payload["candidate_name"],
                candidate_email=payload["candidate_email"],
                answers=graded["answers"],
                score=graded["score"],
                max_score=graded["max_score"],
                time_taken=payload["time_taken"],
                college_id=college_id,
                candidate_id=_uuid(payload["candidate_id"]),
                college_candidate_id=_uuid(payload["college_candidate_id"]),
            ))
            db.commit()
        except IntegrityError:
            db.rollback()
            raise AlreadySubmitted("You have already submitted this assessment.")
        except SQLAlchemyError as exc:
            db.rollback()
            raise SubmissionError(f"Submission failed: {exc}")
        finally:
            db.close()

        logger.info("Stored submission %s for assessment %s", submission_id, payload["assessment_id"])
        return str(submission_id)

    return write


def has_submitted(
    db: Session,
    assessment_id: uuid.UUID,
    candidate_id: uuid.UUID,
    college_id: Optional[uuid.UUID],
) -> bool:
    column = (
        AssessmentSubmission.college_candidate_id
        if college_id
        else AssessmentSubmission.candidate_id
    )
    return (
        db.query(AssessmentSubmission.id)
        .filter(
            AssessmentSubmission.assessment_id == assessment_id,
            column == candidate_id,
        )
        .first()
        is not None
    )


def load_candidate(
    db: Session,
    candidate_id: uuid.UUID,
    college_id: Optional[uuid.UUID],
) -> Optional[CandidateContext]:
    if college_id:
        row = (
            db.query(CollegeCandidate)
            .filter(
                CollegeCandidate.id == candidate_id,
                CollegeCandidate.college_id == college_id,
            )
            .first()
        )
        if row:
            return CandidateContext(id=str(row.id), name=row.name, email=row.email, college_id=str(college_id))
        return None

    row = db.query(Candidate).filter(Candidate.id == candidate_id).first()
    if row:
        return CandidateContext(id=str(row.id), name=row.full_name, email=row.email)
    return None


class AttemptService:
    def __init__(
        self,
        registry: AttemptRegistry,
        store: LocalObjectStore,
        session_factory: Callable[[], Session],
    ):
        self.registry = registry
        self.store = store
        self.session_factory = session_factory

    def open_attempt(self, db: Session, payload: AttemptStartRequest) -> AttemptSession:
        row = db.query(Assessment).filter(Assessment.id == payload.assessment_id).first()
        if not row:
            raise NotFoundError("Assessment not found.")
        document = load_assessment(row)

        candidate = None
        linkage = Linkage(college_id=str(payload.college_id) if payload.college_id else None)

        if payload.candidate_id:
            linkage = Linkage(
                college_id=linkage.college_id,
                candidate_id=str(payload.candidate_id),
            )
            if has_submitted(db, row.id, payload.candidate_id, payload.college_id):
                raise AlreadySubmitted("You have already submitted this assessment.")

            candidate = load_candidate(db, payload.candidate_id, payload.college_id)
            if candidate is None:
                raise NotFoundError("Candidate not found for this assessment link.")

        session = AttemptSession(
            document=document,
            writer=make_submission_writer(self.session_factory, document),
            candidate=candidate,
            linkage=linkage,
            on_finish=self._finished,
        )
        logger.info("Opened attempt %s for assessment %s", session.id, document.id)
        return self.registry.add(session)

    def _finished(self, session: AttemptSession) -> None:
        self.registry.remove(session.id)
        logger.info("Attempt %s finished with submission %s", session.id, session.assembler.submission_id)

    def get(self, attempt_id: str) -> AttemptSession:
        return self.registry.get(attempt_id)

    def start(self, attempt_id: str) -> AttemptSession:
        """Must be called from a coroutine: the countdown runs on the loop."""
        session = self.registry.get(attempt_id)
        timer = session.start()
        if timer is not None:
            timer.start()
        return session

    def upload(self, attempt_id: str, question_id: str, file_name: str, stream: BinaryIO) -> str:
        session = self.registry.get(attempt_id)
        return session.upload(question_id, file_name, stream, self.store)

    def submit(self, attempt_id: str) -> Optional[str]:
        try:
            return self.registry.get(attempt_id).submit()
        except AlreadySubmitted:
            # Another attempt of the same candidate got there first
            self.registry.remove(attempt_id)
            raise


_service: Optional[AttemptService] = None


def get_attempt_service() -> AttemptService:
    global _service
    if _service is None:
        from app.core.config import settings
        from app.db.session import SessionLocal
        from app.storage.object_store import get_object_store

        _service = AttemptService(
            AttemptRegistry(ttl_seconds=settings.ATTEMPT_TTL_SECONDS),
            get_object_store(),
            SessionLocal,
        )
    return _service
