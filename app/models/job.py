import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, Uuid

from app.db.base import Base, JSONType


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    position = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String(100), nullable=False, default="Briefcase")
    openings = Column(Integer, nullable=False, default=1)
    experience = Column(String(100), nullable=False, default="")
    location = Column(String(255), nullable=False, default="")

    highlight_points = Column(JSONType, nullable=False, default=list)
    responsibilities = Column(JSONType, nullable=False, default=list)
    skills = Column(JSONType, nullable=False, default=list)

    status = Column(String(20), nullable=False, default="Open")
    type = Column(String(20), nullable=False, default="full-time")

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
