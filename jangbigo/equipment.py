"""Vehicles registered by users; owners manage their own, admins manage all."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from . import models
from .errors import ForbiddenError, NotFoundError
from .schemas import EquipmentCreate, EquipmentUpdate

logger = logging.getLogger(__name__)


def _is_admin(user: models.User) -> bool:
    return user.role is models.UserRole.ADMIN


def list_equipment(
    db: Session,
    viewer: models.User,
    page: int = 1,
    limit: int = 10,
    vehicle_type: str | None = None,
    user_id: int | None = None,
) -> tuple[list[models.Equipment], int]:
    """Returns ``(rows, total)``; non-admins only ever see their own rows."""
    Equipment = models.Equipment
    if not _is_admin(viewer):
        user_id = viewer.id

    conditions = []
    if vehicle_type:
        conditions.append(Equipment.vehicle_type == vehicle_type)
    if user_id is not None:
        conditions.append(Equipment.user_id == user_id)

    total = db.execute(select(func.count(Equipment.id)).where(*conditions)).scalar_one()
    rows = db.execute(
        select(Equipment)
        .where(*conditions)
        .options(selectinload(Equipment.user))
        .order_by(Equipment.created_at.desc(), Equipment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).scalars()
    return list(rows), total


def get_equipment(db: Session, equipment_id: int, viewer: models.User, action: str = "access") -> models.Equipment:
    equipment = db.get(models.Equipment, equipment_id)
    if equipment is None:
        raise NotFoundError("Equipment not found")
    if not _is_admin(viewer) and equipment.user_id != viewer.id:
        raise ForbiddenError(f"You can only {action} your own equipment")
    return equipment


def create_equipment(db: Session, user_id: int, data: EquipmentCreate) -> models.Equipment:
    equipment = models.Equipment(user_id=user_id, **data.model_dump())
    db.add(equipment)
    db.commit()
    db.refresh(equipment)
    logger.info("equipment %s registered by user %s", equipment.id, user_id)
    return equipment


def update_equipment(
    db: Session, equipment_id: int, viewer: models.User, data: EquipmentUpdate
) -> models.Equipment:
    equipment = get_equipment(db, equipment_id, viewer, action="update")
    for name, value in data.model_dump(exclude_unset=True).items():
        setattr(equipment, name, value)
    equipment.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(equipment)
    return equipment


def delete_equipment(db: Session, equipment: models.Equipment) -> None:
    equipment_id = equipment.id
    db.delete(equipment)
    db.commit()
    logger.info("equipment %s deleted", equipment_id)
