from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.user import Credentials, UserCreatedResponse, UserRead, UserSummary
from app.services.users import create_user, list_users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
def get_users(db: Session = Depends(get_db)) -> list[UserRead]:
    return [UserRead.model_validate(u) for u in list_users(db)]


@router.post("", response_model=UserCreatedResponse, status_code=201)
def post_user(payload: Credentials, db: Session = Depends(get_db)) -> UserCreatedResponse:
    user = create_user(db, payload.username, payload.password)
    return UserCreatedResponse(
        message="User created successfully",
        user=UserSummary(id=user.id, username=user.username),
    )
