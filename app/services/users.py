# app/services/users.py

"""Staff accounts: bcrypt password hashes plus role / tab claims."""

import logging
from typing import List

import bcrypt
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationFailed
from app.models.user import User
from app.schemas.user import NAV_ITEMS, SUPER_ADMIN_TABS, LoginRequest, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    return bcrypt.checkpw(password.encode(), hashed.encode())


def visible_tabs(role: str, accessible_tabs: List[str]) -> List[str]:
    """Navigation entries a user may see."""
    if role == "superAdmin":
        return list(NAV_ITEMS)
    return [tab for tab in NAV_ITEMS if tab in accessible_tabs and tab not in SUPER_ADMIN_TABS]


def stored_tabs(role: str, accessible_tabs: List[str]) -> List[str]:
    # Super admins implicitly see everything and keep an empty list
    return [] if role == "superAdmin" else list(accessible_tabs)


def user_to_dict(user: User) -> dict:
    return {
        "uid": user.id,
        "email": user.email,
        "role": user.role,
        "accessible_tabs": user.accessible_tabs or [],
        "visible_tabs": visible_tabs(user.role, user.accessible_tabs or []),
    }


class UserService:
    @staticmethod
    def create(db: Session, payload: UserCreate) -> User:
        email = payload.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise ValidationFailed("A user with this email already exists.", field="email")

        user = User(
            email=email,
            password_hash=hash_password(payload.password),
            role=payload.role,
            accessible_tabs=stored_tabs(payload.role, payload.accessible_tabs),
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info("Created user %s with role %s", user.email, user.role)
        return user

    @staticmethod
    def update(db: Session, payload: UserUpdate) -> User:
        user = db.query(User).filter(User.id == payload.uid).first()
        if not user:
            raise NotFoundError("User not found")

        if payload.password:
            user.password_hash = hash_password(payload.password)
        user.role = payload.role
        user.accessible_tabs = stored_tabs(payload.role, payload.accessible_tabs)

        db.commit()
        db.refresh(user)
        return user

    @staticmethod
    def delete(db: Session, uid) -> None:
        user = db.query(User).filter(User.id == uid).first()
        if not user:
            raise NotFoundError("User not found")
        db.delete(user)
        db.commit()
        logger.info("Deleted user %s", user.email)

    @staticmethod
    def authenticate(db: Session, payload: LoginRequest) -> User:
        user = db.query(User).filter(User.email == payload.email.lower()).first()
        if not user or not verify_password(payload.password, user.password_hash):
            raise ValidationFailed("Invalid email or password.", field="password")
        return user
