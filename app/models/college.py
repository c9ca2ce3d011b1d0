import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


# =========================
# College (partner institution)
# =========================
class College(Base):
    __tablename__ = "colleges"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=True)
    contact_person = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    candidates = relationship(
        "CollegeCandidate",
        back_populates="college",
        cascade="all, delete-orphan",
    )


# =========================
# College candidate (bulk-imported)
# =========================
class CollegeCandidate(Base):
    __tablename__ = "college_candidates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    college_id = Column(
        Uuid,
        ForeignKey("colleges.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    status = Column(String(50), nullable=True)

    imported_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    college = relationship("College", back_populates="candidates")
