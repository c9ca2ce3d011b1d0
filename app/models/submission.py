import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from app.db.base import Base, JSONType


# =========================
# Assessment submission (one per completed attempt)
# =========================
class AssessmentSubmission(Base):
    __tablename__ = "assessment_submissions"
    # One submission per linked candidate; anonymous rows (both null) are free
    __table_args__ = (
        UniqueConstraint("assessment_id", "candidate_id", name="uq_submission_candidate"),
        UniqueConstraint("assessment_id", "college_candidate_id", name="uq_submission_college_candidate"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    assessment_id = Column(
        Uuid,
        ForeignKey("assessments.id"),
        nullable=False,
        index=True,
    )
    assessment_title = Column(String(255), nullable=False)

    candidate_name = Column(String(255), nullable=False, default="N/A")
    candidate_email = Column(String(255), nullable=False, default="N/A")

    # [{"question_id", "question_text", "answer", "points", "is_correct"}]
    answers = Column(JSONType, nullable=False)

    score = Column(Float, nullable=True)
    max_score = Column(Float, nullable=True)

    time_taken = Column(Integer, nullable=False, default=0)  # seconds

    # Linkage back to the invited candidate, null when absent
    college_id = Column(Uuid, nullable=True, index=True)
    candidate_id = Column(Uuid, nullable=True, index=True)
    college_candidate_id = Column(Uuid, nullable=True, index=True)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


# =========================
# Assessment invitation (one per email sent)
# =========================
class AssessmentInvitation(Base):
    __tablename__ = "assessment_invitations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    candidate_id = Column(Uuid, nullable=False, index=True)
    candidate_email = Column(String(255), nullable=False)

    assessment_id = Column(Uuid, nullable=False, index=True)
    assessment_title = Column(String(255), nullable=False)
    college_id = Column(Uuid, nullable=True, index=True)

    sent_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
