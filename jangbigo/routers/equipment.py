"""Vehicle registry; users see and edit their own equipment, admins all of it."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from .. import crud, models
from .. import equipment as equipment_service
from ..auth import get_current_user
from ..database import get_db
from ..schemas import (
    EquipmentCreate,
    EquipmentListOut,
    EquipmentOut,
    EquipmentUpdate,
    Envelope,
    Pagination,
    envelope,
)

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("", response_model=Envelope[EquipmentListOut])
def list_equipment(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    vehicle_type: str | None = Query(None, alias="type"),
    user_id: int | None = Query(None, alias="userId"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    rows, total = equipment_service.list_equipment(
        db, current_user, page=page, limit=limit, vehicle_type=vehicle_type, user_id=user_id
    )
    data = EquipmentListOut(
        equipment=[EquipmentOut.model_validate(e) for e in rows],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=crud.total_pages(total, limit)),
    )
    return envelope("Equipment retrieved successfully", data)


@router.get("/{equipment_id}", response_model=Envelope[EquipmentOut])
def get_equipment(
    equipment_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    equipment = equipment_service.get_equipment(db, equipment_id, current_user)
    return envelope("Equipment retrieved successfully", EquipmentOut.model_validate(equipment))


@router.post("", response_model=Envelope[EquipmentOut], status_code=status.HTTP_201_CREATED)
def create_equipment(
    payload: EquipmentCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    equipment = equipment_service.create_equipment(db, current_user.id, payload)
    return envelope(
        "Equipment created successfully", EquipmentOut.model_validate(equipment), status.HTTP_201_CREATED
    )


@router.put("/{equipment_id}", response_model=Envelope[EquipmentOut])
def update_equipment(
    equipment_id: int,
    payload: EquipmentUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    equipment = equipment_service.update_equipment(db, equipment_id, current_user, payload)
    return envelope("Equipment updated successfully", EquipmentOut.model_validate(equipment))


@router.delete("/{equipment_id}", response_model=Envelope[EquipmentOut])
def delete_equipment(
    equipment_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    equipment = equipment_service.get_equipment(db, equipment_id, current_user, action="delete")
    data = EquipmentOut.model_validate(equipment)
    equipment_service.delete_equipment(db, equipment)
    return envelope("Equipment deleted successfully", data)
