# app/services/submissions.py

"""Staff-side operations over stored submissions."""

import csv
import io
import logging
import os
import uuid
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import NotFoundError, PersistenceError, ValidationFailed
from app.engine.grader import apply_manual_points, grade_answers
from app.engine.sections import load_assessment
from app.models.assessment import Assessment
from app.models.submission import AssessmentSubmission
from app.reports.report_builder import generate_submission_report
from app.reports.report_docx import generate_report_docx

logger = logging.getLogger(__name__)

BASE_COLUMNS = {
    "candidate_name": "Candidate Name",
    "candidate_email": "Candidate Email",
    "submitted_at": "Submitted At",
    "time_taken": "Time Taken (seconds)",
    "score": "Score",
}

ANSWER_FIELD_PREFIX = "answer_"


def _get_assessment(db: Session, assessment_id: uuid.UUID) -> Assessment:
    row = db.query(Assessment).filter(Assessment.id == assessment_id).first()
    if not row:
        raise NotFoundError("Assessment not found.")
    return row


def get_submission(db: Session, submission_id: uuid.UUID) -> AssessmentSubmission:
    row = db.query(AssessmentSubmission).filter(AssessmentSubmission.id == submission_id).first()
    if not row:
        raise NotFoundError("Submission not found.")
    return row


def list_submissions(db: Session, assessment_id: Optional[uuid.UUID] = None) -> List[AssessmentSubmission]:
    query = db.query(AssessmentSubmission)
    if assessment_id:
        query = query.filter(AssessmentSubmission.assessment_id == assessment_id)
    return query.order_by(AssessmentSubmission.submitted_at.desc()).all()


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise PersistenceError(f"Could not {action}: {exc}")


# ------------------------------------------------------------
# CSV export
# ------------------------------------------------------------

def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        return "; ".join(str(v) for v in value)
    return str(value)


def export_csv(
    db: Session,
    assessment_id: uuid.UUID,
    fields: Optional[Sequence[str]] = None,
) -> str:
    """
    Render an assessment's submissions as CSV.

    ``fields`` selects columns by key: the base keys above plus
    ``answer_<question id>``. None selects everything.
    """
    document = load_assessment(_get_assessment(db, assessment_id))

    columns: Dict[str, str] = dict(BASE_COLUMNS)
    for question in document.all_questions():
        columns[f"{ANSWER_FIELD_PREFIX}{question.id}"] = f"Q: {question.text}"

    if fields is not None:
        wanted = set(fields)
        columns = {key: label for key, label in columns.items() if key in wanted}
    if not columns:
        raise ValidationFailed("Please select at least one field to export.", field="fields")

    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(columns.values())

    for row in list_submissions(db, assessment_id):
        answers = {a.get("question_id"): a.get("answer") for a in (row.answers or [])}
        values = []
        for key in columns:
            if key.startswith(ANSWER_FIELD_PREFIX):
                values.append(_cell(answers.get(key[len(ANSWER_FIELD_PREFIX):])))
            elif key == "submitted_at":
                values.append(row.submitted_at.strftime("%Y-%m-%d %H:%M:%S") if row.submitted_at else "")
            else:
                values.append(_cell(getattr(row, key)))
        writer.writerow(values)

    return out.getvalue()


# ------------------------------------------------------------
# Grading
# ------------------------------------------------------------

def _require_auto_grading(row: Assessment) -> None:
    if not row.should_auto_grade:
        raise ValidationFailed("Auto-grading is not enabled for this assessment.")


def regrade_assessment(db: Session, assessment_id: uuid.UUID) -> Dict[str, Any]:
    """Re-run auto grading for every submission of an assessment."""
    assessment = _get_assessment(db, assessment_id)
    _require_auto_grading(assessment)
    questions = load_assessment(assessment).all_questions()

    details: Dict[str, Any] = {}
    rows = list_submissions(db, assessment_id)
    for row in rows:
        graded = grade_answers(row.answers or [], questions)
        row.answers = graded["answers"]
        row.score = graded["score"]
        row.max_score = graded["max_score"]
        details[str(row.id)] = {"score": graded["score"], "max_score": graded["max_score"]}

    _commit(db, "regrade submissions")
    logger.info("Regraded %d submissions for assessment %s", len(rows), assessment_id)
    return {"updated": len(rows), "details": details}


def apply_grades(db: Session, submission_id: uuid.UUID, points: Dict[str, float]) -> AssessmentSubmission:
    row = get_submission(db, submission_id)
    _require_auto_grading(_get_assessment(db, row.assessment_id))

    known = {a.get("question_id") for a in (row.answers or [])}
    unknown = sorted(set(points) - known)
    if unknown:
        raise ValidationFailed(f"Unknown question ids: {', '.join(unknown)}", field="points")

    result = apply_manual_points(row.answers or [], points)
    row.answers = result["answers"]
    row.score = result["score"]

    _commit(db, "save grades")
    db.refresh(row)
    return row


def delete_submission(db: Session, assessment_id: uuid.UUID, candidate_id: uuid.UUID, college: bool) -> int:
    column = AssessmentSubmission.college_candidate_id if college else AssessmentSubmission.candidate_id
    deleted = (
        db.query(AssessmentSubmission)
        .filter(AssessmentSubmission.assessment_id == assessment_id, column == candidate_id)
        .delete(synchronize_session=False)
    )
    _commit(db, "reset submission")
    return deleted


# ------------------------------------------------------------
# Reports
# ------------------------------------------------------------

def _as_dict(row: AssessmentSubmission) -> Dict[str, Any]:
    return {
        "candidate_name": row.candidate_name,
        "candidate_email": row.candidate_email,
        "assessment_title": row.assessment_title,
        "answers": row.answers,
        "score": row.score,
        "max_score": row.max_score,
        "time_taken": row.time_taken,
        "submitted_at": row.submitted_at,
    }


def build_report(db: Session, submission_id: uuid.UUID) -> Dict[str, Any]:
    return generate_submission_report(_as_dict(get_submission(db, submission_id)))


def write_report_docx(db: Session, submission_id: uuid.UUID, reports_dir: Optional[str] = None) -> str:
    report = build_report(db, submission_id)

    reports_dir = reports_dir or settings.REPORTS_DIR
    os.makedirs(reports_dir, exist_ok=True)
    file_path = os.path.join(reports_dir, f"submission_{submission_id}.docx")

    generate_report_docx(report, file_path)
    logger.info("Wrote report %s", file_path)
    return file_path
