from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.auth import hash_password, verify_password
from app.core.errors import ConflictError, ValidationError
from app.models.user import User

logger = logging.getLogger("app.auth")

MIN_REGISTER_PASSWORD_LENGTH = 6


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.created_at.desc())).scalars().all())


def create_user(db: Session, username: str, password: str, *, min_password_length: int = 0) -> User:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required")
    if len(password) < min_password_length:
        raise ValidationError(f"Password must be at least {min_password_length} characters long")
    if db.execute(select(User).where(User.username == username)).scalars().first():
        raise ConflictError("Username already exists")
    password_hash, password_salt = hash_password(password)
    user = User(username=username, password_hash=password_hash, password_salt=password_salt)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError("Username already exists") from e
    db.refresh(user)
    logger.info("user_created id=%s username=%s", user.id, user.username)
    return user


def authenticate(db: Session, username: str, password: str) -> User | None:
    user = db.execute(select(User).where(User.username == (username or "").strip())).scalars().first()
    if not user or not verify_password(password, user.password_hash, user.password_salt):
        logger.info("login_failed username=%s", (username or "").strip())
        return None
    return user
