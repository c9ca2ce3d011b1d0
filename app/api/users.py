from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.user import LoginRequest, UserCreate, UserDelete, UserRead, UserUpdate
from app.services.users import UserService, user_to_dict

router = APIRouter(prefix="/users", tags=["Users"])
auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("", response_model=List[UserRead])
def list_users(db: Session = Depends(get_db)):
    return [user_to_dict(u) for u in db.query(User).order_by(User.created_at).all()]


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return user_to_dict(UserService.create(db, payload))


@router.put("", response_model=UserRead)
def update_user(payload: UserUpdate, db: Session = Depends(get_db)):
    return user_to_dict(UserService.update(db, payload))


@router.delete("", response_model=ApiResponse)
def delete_user(payload: UserDelete, db: Session = Depends(get_db)):
    UserService.delete(db, payload.uid)
    return ApiResponse(message="User deleted successfully")


@auth_router.post("/login", response_model=UserRead)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    return user_to_dict(UserService.authenticate(db, payload))
