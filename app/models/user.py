import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Uuid

from app.db.base import Base, JSONType


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)

    # Role claim: "superAdmin" | "user"
    role = Column(String(20), nullable=False, default="user")
    accessible_tabs = Column(JSONType, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
