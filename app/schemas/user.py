# app/schemas/user.py

from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

UserRole = Literal["superAdmin", "user"]

NAV_ITEMS = (
    "overview",
    "jobs",
    "assessments",
    "templates",
    "colleges",
    "all",
    "full-time",
    "intern",
    "freelance",
    "users",
)

# Never grantable to the "user" role
SUPER_ADMIN_TABS = ("users",)


class _TabsMixin(BaseModel):
    role: UserRole
    accessible_tabs: List[str] = []

    @model_validator(mode="after")
    def check_tabs(self):
        unknown = [t for t in self.accessible_tabs if t not in NAV_ITEMS]
        if unknown:
            raise ValueError(f"Unknown tab(s): {', '.join(unknown)}")
        if self.role == "user" and not self.accessible_tabs:
            raise ValueError("At least one tab must be selected for the 'user' role.")
        return self


class UserCreate(_TabsMixin):
    email: EmailStr
    password: str = Field(..., min_length=6)


class UserUpdate(_TabsMixin):
    uid: UUID
    password: Optional[str] = Field(None, min_length=6)


class UserDelete(BaseModel):
    uid: UUID


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    uid: UUID
    email: str
    role: UserRole
    accessible_tabs: List[str]
    visible_tabs: List[str]
