import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text, Uuid

from app.db.base import Base


# =========================
# Candidate (job application)
# =========================
class Candidate(Base):
    __tablename__ = "candidates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    contact_number = Column(String(50), nullable=False, default="")
    whatsapp_number = Column(String(50), nullable=False, default="")

    address = Column(Text, nullable=False, default="")
    city = Column(String(100), nullable=False, default="")
    state = Column(String(100), nullable=False, default="")
    pincode = Column(String(20), nullable=False, default="")

    education = Column(Text, nullable=False, default="")
    experience = Column(Text, nullable=False, default="")
    work_experience = Column(Text, nullable=True)
    position = Column(String(255), nullable=False)
    portfolio = Column(String(500), nullable=False, default="")

    resume_url = Column(String(1000), nullable=True)
    avatar = Column(String(1000), nullable=True)

    status = Column(String(50), nullable=False, default="Applied")
    type = Column(String(20), nullable=False, default="full-time")
    rejection_reason = Column(Text, nullable=True)
    introduction_video_intern = Column(String(1000), nullable=True)
    comments = Column(Text, nullable=True)

    submitted_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
