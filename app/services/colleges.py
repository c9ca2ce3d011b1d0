# app/services/colleges.py

"""College rosters: CRUD, CSV import/export and per-assessment stats."""

import csv
import io
import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, PersistenceError, ValidationFailed
from app.engine.sections import load_assessment
from app.models.assessment import Assessment
from app.models.college import College, CollegeCandidate
from app.models.submission import AssessmentInvitation, AssessmentSubmission

logger = logging.getLogger(__name__)

FIRST_NAME_KEYS = ("first name", "firstname")
MIDDLE_NAME_KEYS = ("middle name", "middlename")
LAST_NAME_KEYS = ("last name", "lastname")
FULL_NAME_KEYS = ("full name", "name")
EMAIL_KEYS = ("email", "email address", "personal email")

EXPORT_COLUMNS = {
    "name": "Candidate Name",
    "email": "Candidate Email",
    "imported_at": "Imported At",
}


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise PersistenceError(f"Could not {action}: {exc}")


def get_assessment(db: Session, assessment_id: uuid.UUID) -> Assessment:
    row = db.query(Assessment).filter(Assessment.id == assessment_id).first()
    if not row:
        raise NotFoundError("Assessment not found.")
    return row


# ------------------------------------------------------------
# Colleges
# ------------------------------------------------------------

def get_college(db: Session, college_id: uuid.UUID) -> College:
    college = db.query(College).filter(College.id == college_id).first()
    if not college:
        raise NotFoundError("College not found.")
    return college


def list_colleges(db: Session) -> List[Dict[str, Any]]:
    counts = dict(
        db.query(CollegeCandidate.college_id, func.count(CollegeCandidate.id))
        .group_by(CollegeCandidate.college_id)
        .all()
    )
    return [
        {
            "id": c.id,
            "name": c.name,
            "location": c.location,
            "contact_person": c.contact_person,
            "contact_email": c.contact_email,
            "created_at": c.created_at,
            "candidate_count": counts.get(c.id, 0),
        }
        for c in db.query(College).order_by(College.created_at.desc()).all()
    ]


def create_college(db: Session, data: Dict[str, Any]) -> College:
    college = College(**data)
    db.add(college)
    _commit(db, "create college")
    db.refresh(college)
    return college


def update_college(db: Session, college_id: uuid.UUID, data: Dict[str, Any]) -> College:
    college = get_college(db, college_id)
    for key, value in data.items():
        setattr(college, key, value)
    _commit(db, "update college")
    db.refresh(college)
    return college


def delete_college(db: Session, college_id: uuid.UUID) -> None:
    college = get_college(db, college_id)
    db.delete(college)
    _commit(db, "delete college")
    logger.info("Deleted college %s and its candidates", college_id)


# ------------------------------------------------------------
# Candidates
# ------------------------------------------------------------

def get_college_candidate(db: Session, college_id: uuid.UUID, candidate_id: uuid.UUID) -> CollegeCandidate:
    candidate = (
        db.query(CollegeCandidate)
        .filter(CollegeCandidate.id == candidate_id, CollegeCandidate.college_id == college_id)
        .first()
    )
    if not candidate:
        raise NotFoundError("College candidate not found.")
    return candidate


def list_candidates(db: Session, college_id: uuid.UUID) -> List[Dict[str, Any]]:
    """Candidates of a college, each with the submissions they made."""
    get_college(db, college_id)
    candidates = (
        db.query(CollegeCandidate)
        .filter(CollegeCandidate.college_id == college_id)
        .order_by(CollegeCandidate.imported_at.desc())
        .all()
    )

    by_candidate: Dict[uuid.UUID, List[AssessmentSubmission]] = {}
    for submission in (
        db.query(AssessmentSubmission)
        .filter(AssessmentSubmission.college_id == college_id)
        .all()
    ):
        by_candidate.setdefault(submission.college_candidate_id, []).append(submission)

    return [
        {
            "id": c.id,
            "college_id": c.college_id,
            "name": c.name,
            "email": c.email,
            "status": c.status,
            "imported_at": c.imported_at,
            "submissions": by_candidate.get(c.id, []),
        }
        for c in candidates
    ]


def add_candidate(db: Session, college_id: uuid.UUID, name: str, email: str) -> CollegeCandidate:
    get_college(db, college_id)
    candidate = CollegeCandidate(college_id=college_id, name=name.strip(), email=email.strip())
    db.add(candidate)
    _commit(db, "add college candidate")
    db.refresh(candidate)
    return candidate


def set_candidate_status(db: Session, college_id: uuid.UUID, candidate_id: uuid.UUID, status: str) -> CollegeCandidate:
    candidate = get_college_candidate(db, college_id, candidate_id)
    candidate.status = status
    _commit(db, "update candidate status")
    db.refresh(candidate)
    return candidate


def delete_candidate(db: Session, college_id: uuid.UUID, candidate_id: uuid.UUID) -> None:
    db.delete(get_college_candidate(db, college_id, candidate_id))
    _commit(db, "delete college candidate")


# ------------------------------------------------------------
# CSV import / export
# ------------------------------------------------------------

def _first(row: Dict[str, str], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = (row.get(key) or "").strip()
        if value:
            return value
    return None


def parse_roster(text: str) -> List[Dict[str, str]]:
    """
    Pull ``{"name", "email"}`` pairs out of an uploaded roster.

    Headers are matched case-insensitively. A full-name column wins over
    first/middle/last parts; rows missing a name or an email are skipped.
    """
    reader = csv.DictReader(io.StringIO(text))
    if reader.fieldnames:
        reader.fieldnames = [h.strip().lower() for h in reader.fieldnames]

    rows = []
    for row in reader:
        name = _first(row, FULL_NAME_KEYS)
        if not name:
            parts = [_first(row, FIRST_NAME_KEYS), _first(row, MIDDLE_NAME_KEYS), _first(row, LAST_NAME_KEYS)]
            name = " ".join(p for p in parts if p)
        email = _first(row, EMAIL_KEYS)

        if name and email:
            rows.append({"name": name, "email": email})
    return rows


def import_candidates(db: Session, college_id: uuid.UUID, content: bytes) -> int:
    get_college(db, college_id)

    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationFailed("CSV file must be UTF-8 encoded.", field="file")

    try:
        rows = parse_roster(text)
    except csv.Error as exc:
        raise ValidationFailed(f"CSV Parse Error: {exc}", field="file")

    if not rows:
        raise ValidationFailed(
            "No valid rows with name and email information could be found in the CSV.",
            field="file",
        )

    db.add_all(CollegeCandidate(college_id=college_id, **row) for row in rows)
    _commit(db, "save imported candidates")
    logger.info("Imported %d candidates into college %s", len(rows), college_id)
    return len(rows)


def export_candidates(
    db: Session,
    college_id: uuid.UUID,
    fields: Optional[Sequence[str]] = None,
    assessment_id: Optional[uuid.UUID] = None,
) -> str:
    """
    Roster as CSV. With an assessment selected, adds a status column and
    one ``answer_<question id>`` column per question.
    """
    columns: Dict[str, str] = dict(EXPORT_COLUMNS)
    assessment = None
    if assessment_id:
        assessment = load_assessment(get_assessment(db, assessment_id))
        columns["assessment_status"] = f"Status for '{assessment.title}'"
        for question in assessment.all_questions():
            columns[f"answer_{question.id}"] = f"Q: {question.text}"

    if fields is not None:
        wanted = set(fields)
        columns = {key: label for key, label in columns.items() if key in wanted}
    if not columns:
        raise ValidationFailed("Please select at least one field to export.", field="fields")

    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(columns.values())

    for candidate in list_candidates(db, college_id):
        submission = None
        if assessment is not None:
            submission = next(
                (s for s in candidate["submissions"] if str(s.assessment_id) == assessment.id),
                None,
            )
        answers = {a.get("question_id"): a.get("answer") for a in (submission.answers if submission else [])}

        values = []
        for key in columns:
            if key == "assessment_status":
                values.append("Submitted" if submission else "Not Submitted")
            elif key.startswith("answer_"):
                answer = answers.get(key[len("answer_"):])
                values.append("; ".join(answer) if isinstance(answer, list) else (answer or ""))
            elif key == "imported_at":
                values.append(candidate["imported_at"].isoformat() if candidate["imported_at"] else "")
            else:
                values.append(candidate[key] or "")
        writer.writerow(values)

    return out.getvalue()


# ------------------------------------------------------------
# Stats
# ------------------------------------------------------------

def assessment_stats(db: Session, college_id: uuid.UUID, assessment_id: uuid.UUID) -> Dict[str, Any]:
    get_college(db, college_id)
    assessment = get_assessment(db, assessment_id)

    total = db.query(func.count(CollegeCandidate.id)).filter(CollegeCandidate.college_id == college_id).scalar()
    invitations = (
        db.query(func.count(AssessmentInvitation.id))
        .filter(
            AssessmentInvitation.college_id == college_id,
            AssessmentInvitation.assessment_id == assessment_id,
        )
        .scalar()
    )
    submissions = (
        db.query(func.count(AssessmentSubmission.id))
        .filter(
            AssessmentSubmission.college_id == college_id,
            AssessmentSubmission.assessment_id == assessment_id,
        )
        .scalar()
    )

    return {
        "assessment_title": assessment.title,
        "total_candidates": total or 0,
        "invitations_sent": invitations or 0,
        "submissions_received": submissions or 0,
        "completion_percentage": (submissions / invitations * 100) if invitations else 0.0,
    }
