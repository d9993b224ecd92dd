from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.core.auth import create_session_token, get_current_user
from app.core.errors import ValidationError
from app.db.session import get_db
from app.schemas.user import Credentials, UserCreatedResponse, UserSummary
from app.services.users import MIN_REGISTER_PASSWORD_LENGTH, authenticate, create_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserCreatedResponse, status_code=201)
def register(payload: Credentials, db: Session = Depends(get_db)) -> UserCreatedResponse:
    user = create_user(db, payload.username, payload.password, min_password_length=MIN_REGISTER_PASSWORD_LENGTH)
    return UserCreatedResponse(
        message="User registered successfully",
        user=UserSummary(id=user.id, username=user.username),
    )


@router.post("/login")
def login(payload: Credentials, request: Request, response: Response, db: Session = Depends(get_db)) -> dict:
    if not payload.username.strip() or not payload.password:
        raise ValidationError("Username and password are required")
    user = authenticate(db, payload.username, payload.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    settings = request.app.state.settings
    token = create_session_token(
        user_id=str(user.id),
        username=user.username,
        secret=settings.auth_secret,
        ttl_hours=settings.auth_session_hours,
    )
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        httponly=True,
        samesite="strict",
        secure=settings.app_env.lower() == "prod",
        max_age=int(settings.auth_session_hours * 3600),
        path="/",
    )
    return {
        "message": "Login successful",
        "user": {"id": str(user.id), "username": user.username},
    }


@router.post("/logout")
def logout(request: Request, response: Response) -> dict:
    response.delete_cookie(key=request.app.state.settings.auth_cookie_name, path="/")
    return {"message": "Logged out"}


@router.get("/me")
def me(current=Depends(get_current_user)) -> dict:
    return {
        "authenticated": True,
        "user": {"id": current.user_id, "username": current.username},
    }
