"""User administration; everyone may read and edit their own record."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import crud, models
from ..auth import get_current_user, require_admin
from ..database import get_db
from ..schemas import Envelope, Pagination, UserCreate, UserListOut, UserOut, UserUpdate, envelope

router = APIRouter(prefix="/users", tags=["users"])


def _require_self_or_admin(user_id: int, current_user: models.User) -> None:
    if current_user.id != user_id and current_user.role is not models.UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")


@router.get("", response_model=Envelope[UserListOut])
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: models.UserRole | None = Query(None),
    db: Session = Depends(get_db),
    _: models.User = Depends(require_admin),
):
    users, total = crud.list_users(db, page=page, limit=limit, role=role)
    data = UserListOut(
        users=[UserOut.model_validate(u) for u in users],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=crud.total_pages(total, limit)),
    )
    return envelope("Users retrieved successfully", data)


@router.get("/{user_id}", response_model=Envelope[UserOut])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    _require_self_or_admin(user_id, current_user)
    user = crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return envelope("User retrieved successfully", UserOut.model_validate(user))


@router.post("", response_model=Envelope[UserOut], status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _: models.User = Depends(require_admin),
):
    user = crud.create_user_from_payload(db, payload)
    return envelope("User created successfully", UserOut.model_validate(user), status.HTTP_201_CREATED)


@router.put("/{user_id}", response_model=Envelope[UserOut])
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    _require_self_or_admin(user_id, current_user)
    if payload.role is not None and current_user.role is not models.UserRole.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change user roles")
    user = crud.update_user(db, user_id, payload)
    return envelope("User updated successfully", UserOut.model_validate(user))


@router.delete("/{user_id}", response_model=Envelope[None])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: models.User = Depends(require_admin),
):
    crud.delete_user(db, user_id)
    return envelope("User deleted successfully")
