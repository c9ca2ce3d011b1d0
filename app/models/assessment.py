import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, Uuid

from app.db.base import Base, JSONType


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String(255), nullable=False)

    # Plaintext, compared byte-for-byte at the gate. Never exposed in the
    # candidate view.
    passcode = Column(String(255), nullable=True)
    time_limit = Column(Integer, nullable=True)  # minutes

    authentication = Column(String(50), nullable=False, default="none")
    disable_copy_paste = Column(Boolean, default=False, nullable=False)
    # Enables staff regrading and manual points
    should_auto_grade = Column(Boolean, default=False, nullable=False)

    # [{"id", "title", "questions": [{"id", "text", "type", "options", ...}]}]
    sections = Column(JSONType, nullable=True)
    # Legacy documents keep questions at the top level
    questions = Column(JSONType, nullable=True)

    start_page_title = Column(String(255), nullable=True)
    start_page_instructions = Column(Text, nullable=True)
    start_button_text = Column(String(100), nullable=True)
    success_title = Column(String(255), nullable=True)
    success_message = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
