from __future__ import annotations
import logging
import math
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models
from .errors import ConflictError, NotFoundError
from .schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already exists"

def get_user(db: Session, user_id: int) -> models.User | None:
    return db.get(models.User, user_id)

def get_user_by_email(db: Session, email: str) -> models.User | None:
    return db.query(models.User).filter(models.User.email == email).first()

def get_user_by_kakao_id(db: Session, kakao_id: int) -> models.User | None:
    return db.execute(select(models.User).where(models.User.kakao_id == kakao_id)).scalar_one_or_none()

def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("user write rejected by the database: %s", exc.orig)
        raise ConflictError(EMAIL_TAKEN, field="email") from None

def create_user(
    db: Session,
    *,
    kakao_id: int | None = None,
    email: str | None = None,
    name: str | None = None,
    nickname: str | None = None,
    role: models.UserRole = models.UserRole.USER,
) -> models.User:
    if email and get_user_by_email(db, email):
        raise ConflictError(EMAIL_TAKEN, field="email")
    user = models.User(kakao_id=kakao_id, email=email, name=name, nickname=nickname, role=role)
    db.add(user)
    _commit(db)
    db.refresh(user)
    logger.info("user %s created (kakao_id=%s)", user.id, kakao_id)
    return user

def create_user_from_payload(db: Session, data: UserCreate) -> models.User:
    return create_user(db, email=data.email, name=data.name, nickname=data.nickname, role=data.role)

def find_or_create_kakao_user(
    db: Session, kakao_id: int, email: str | None, name: str | None, nickname: str | None
) -> tuple[models.User, bool]:
    """Returns ``(user, created)``; profile fields are only used on first login."""
    user = get_user_by_kakao_id(db, kakao_id)
    if user is not None:
        return user, False
    return create_user(db, kakao_id=kakao_id, email=email, name=name, nickname=nickname), True

def list_users(
    db: Session, page: int = 1, limit: int = 10, role: models.UserRole | None = None
) -> tuple[list[models.User], int]:
    stmt = select(models.User)
    count_stmt = select(func.count(models.User.id))
    if role is not None:
        stmt = stmt.where(models.User.role == role)
        count_stmt = count_stmt.where(models.User.role == role)
    total = db.execute(count_stmt).scalar_one()
    rows = db.execute(
        stmt.order_by(models.User.created_at.desc(), models.User.id.desc()).offset((page - 1) * limit).limit(limit)
    ).scalars()
    return list(rows), total

def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0

def update_user(db: Session, user_id: int, data: UserUpdate) -> models.User:
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    changes = data.model_dump(exclude_unset=True)
    if changes.get("role") is None:
        changes.pop("role", None)
    email = changes.get("email")
    if email and email != user.email:
        existing = get_user_by_email(db, email)
        if existing is not None and existing.id != user_id:
            raise ConflictError(EMAIL_TAKEN, field="email")
    for name, value in changes.items():
        setattr(user, name, value)
    user.updated_at = datetime.now(timezone.utc)
    _commit(db)
    db.refresh(user)
    return user

def delete_user(db: Session, user_id: int) -> None:
    user = get_user(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    db.delete(user)
    db.commit()
    logger.info("user %s deleted", user_id)
