from __future__ import annotations
from datetime import datetime, date
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import (
    CommunityRole,
    CommunityStatus,
    JobPostCategory,
    JobPostType,
    LadderType,
    LoadingUnloadingService,
    PaymentMethod,
    TravelDistance,
    UserRole,
    WorkDateType,
)
from .rules import LUGGAGE_VOLUMES, is_valid_time

T = TypeVar("T")

ARRIVAL_TIME_MESSAGE = 'Invalid arrival time format. Use format like "6:30" or "14:30"'


class CamelModel(BaseModel):
    """Wire models use the camelCase keys of the mobile client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Envelope(BaseModel, Generic[T]):
    message: str
    status: int
    data: T | None = None


# Users
class UserBrief(CamelModel):
    id: int
    name: str | None = None
    nickname: str | None = None

class UserOut(CamelModel):
    id: int
    kakao_id: str | None = None
    email: str | None = None
    name: str | None = None
    nickname: str | None = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @field_validator("kakao_id", mode="before")
    @classmethod
    def _kakao_id_as_str(cls, v):
        # BigInteger ids do not survive JavaScript number precision
        return None if v is None else str(v)

class UserCreate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    nickname: str | None = Field(None, max_length=100)
    role: UserRole = UserRole.USER

class UserUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    nickname: str | None = Field(None, max_length=100)
    role: UserRole | None = None

class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

class UserListOut(CamelModel):
    users: list[UserOut]
    pagination: Pagination


# Auth
class KakaoLoginIn(CamelModel):
    id_token: str = Field(min_length=1)

class AuthOut(CamelModel):
    user: UserOut
    token: str
    token_type: str = "bearer"


# Communities
class CommunityBrief(CamelModel):
    id: int
    title: str

class CommunityCreate(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    slug: str | None = Field(None, min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    status: CommunityStatus | None = None
    is_private: bool | None = None
    max_members: int | None = Field(None, ge=1, le=10000)
    default_work_fee: float | None = Field(None, ge=0, le=100)
    default_support_fee: float | None = Field(None, ge=0, le=100)

class CommunityUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    slug: str | None = Field(None, min_length=1, max_length=50, pattern=r"^[a-z0-9-]+$")
    status: CommunityStatus | None = None
    is_private: bool | None = None
    max_members: int | None = Field(None, ge=1, le=10000)
    default_work_fee: float | None = Field(None, ge=0, le=100)
    default_support_fee: float | None = Field(None, ge=0, le=100)

class CommunityOut(CamelModel):
    id: int
    title: str
    description: str | None = None
    slug: str
    status: CommunityStatus
    is_private: bool
    max_members: int | None = None
    default_work_fee: float | None = None
    default_support_fee: float | None = None
    created_at: datetime
    updated_at: datetime
    member_count: int | None = None

class MyCommunityOut(CommunityOut):
    role: CommunityRole
    joined_at: datetime

class JoinCommunityIn(CamelModel):
    community_id: int = Field(gt=0)

class InviteUserIn(CamelModel):
    community_id: int = Field(gt=0)
    user_id: int = Field(gt=0)
    role: CommunityRole | None = None

class UpdateMemberRoleIn(CamelModel):
    user_id: int = Field(gt=0)
    role: CommunityRole

class MemberUserOut(UserBrief):
    email: str | None = None

class MemberOut(CamelModel):
    id: int
    user_id: int
    community_id: int
    role: CommunityRole
    joined_at: datetime
    invited_by: int | None = None
    is_active: bool
    user: MemberUserOut | None = None
    inviter: UserBrief | None = None
    community: CommunityBrief | None = None


# Job posts
class JobPostOptionsIn(CamelModel):
    loading_unloading_service: LoadingUnloadingService | None = None
    travel_distance: TravelDistance | None = None
    dump_service: bool | None = None

class JobPostOptionsOut(CamelModel):
    loading_unloading_service: LoadingUnloadingService | None = None
    travel_distance: TravelDistance | None = None
    dump_service: bool = False

class JobPostFields(CamelModel):
    """Fields shared by create and update.

    Everything here is optional at the structural level; which of them a
    post actually needs depends on type, category and ladder type and is
    decided by ``rules.evaluate``.
    """

    # SKY
    equipment_type: str | None = Field(None, max_length=50)
    equipment_lengths: list[int] | None = None

    # LADDER
    ladder_type: LadderType | None = None
    machine_type: str | None = Field(None, max_length=100)
    luggage_volume: str | None = None
    work_floor: int | None = Field(None, ge=2, le=25)
    overall_height: int | None = Field(None, ge=1, le=100)
    ladder_work_duration: str | None = Field(None, max_length=50)
    ladder_work_hours: int | None = Field(None, ge=1, le=24)
    options: JobPostOptionsIn | None = None
    moving_fee: float | None = Field(None, ge=0)
    on_site_fee: float | None = Field(None, ge=0)

    # Scheduling
    work_date_type: WorkDateType | None = None
    work_date: date | None = None
    arrival_time: str | None = None
    work_schedule: str | None = Field(None, max_length=100)
    custom_hours: int | None = Field(None, ge=0)

    # Pricing
    work_cost: float | None = Field(None, ge=0)
    is_night_work: bool | None = None
    price_adjustment: int | None = None
    with_fee: bool | None = None
    total_work_fee: float | None = Field(None, ge=0)
    unit_price_fee: float | None = Field(None, ge=0)
    community_work_fee: float | None = Field(None, ge=0, le=100)
    community_support_fee: float | None = Field(None, ge=0, le=100)

    # Payment
    payment_method: PaymentMethod | None = None
    expected_payment_date: str | None = Field(None, max_length=50)

    # Contact / details
    site_address: str | None = None
    contact_number: str | None = Field(None, max_length=30)
    work_contents: str | None = None
    delivery_info: str | None = None

    @field_validator("luggage_volume")
    @classmethod
    def _known_luggage_volume(cls, v: str | None) -> str | None:
        if v and v not in LUGGAGE_VOLUMES:
            raise ValueError(
                "Invalid luggage volume. Please select from valid options: " + ", ".join(LUGGAGE_VOLUMES)
            )
        return v

    @field_validator("arrival_time")
    @classmethod
    def _arrival_time_format(cls, v: str | None) -> str | None:
        if v is not None and not is_valid_time(v):
            raise ValueError(ARRIVAL_TIME_MESSAGE)
        return v

class JobPostCreate(JobPostFields):
    post_type: JobPostType = Field(alias="type")
    category: JobPostCategory
    community_id: int | None = Field(None, gt=0)
    designated_user_id: int | None = Field(None, gt=0)

class JobPostUpdate(JobPostFields):
    # type, community and designated user are fixed at creation
    category: JobPostCategory | None = None

    @field_validator("category")
    @classmethod
    def _category_not_null(cls, v: JobPostCategory | None) -> JobPostCategory:
        # omitted keeps the stored category, an explicit null is rejected
        if v is None:
            raise ValueError("Category is required")
        return v

class JobPostOut(CamelModel):
    id: int
    post_type: JobPostType = Field(alias="type")
    category: JobPostCategory
    author_id: int
    community_id: int | None = None
    designated_user_id: int | None = None

    equipment_type: str | None = None
    equipment_lengths: list[int] | None = None

    ladder_type: LadderType | None = None
    machine_type: str | None = None
    luggage_volume: str | None = None
    work_floor: int | None = None
    overall_height: int | None = None
    ladder_work_duration: str | None = None
    ladder_work_hours: int | None = None
    options: JobPostOptionsOut | None = None
    moving_fee: float | None = None
    on_site_fee: float | None = None

    work_date_type: WorkDateType | None = None
    work_date: date | None = None
    arrival_time: str | None = None
    work_schedule: str | None = None
    custom_hours: int | None = None

    work_cost: float
    is_night_work: bool
    price_adjustment: int | None = None
    with_fee: bool
    total_work_fee: float | None = None
    unit_price_fee: float | None = None
    community_work_fee: float | None = None
    community_support_fee: float | None = None

    payment_method: PaymentMethod
    expected_payment_date: str

    site_address: str
    contact_number: str
    work_contents: str | None = None
    delivery_info: str

    created_at: datetime
    updated_at: datetime
    author: UserBrief | None = None
    community: CommunityBrief | None = None
    designated_user: UserBrief | None = None


# Equipment
class EquipmentFields(CamelModel):
    """Optional vehicle details and the registry lookup result, stored as received."""

    length: str | None = None
    axle_length: str | None = None
    options: str | None = None
    result_cd: str | None = None
    result_mg: str | None = None
    car_regno: str | None = None
    adm_regno: str | None = None
    erase_date: str | None = None
    car_name: str | None = None
    car_type: str | None = None
    car_vinary_no: str | None = None
    mover_type: str | None = None
    use: str | None = None
    model_year: str | None = None
    color: str | None = None
    source_gb: str | None = None
    first_reg_date: str | None = None
    detail_type: str | None = None
    product_date: str | None = None
    last_owner: str | None = None
    regno: str | None = None
    locate_use: str | None = None
    check_exp_date: str | None = None
    confirm_date: str | None = None
    close_date: str | None = None
    print_name: str | None = None
    gd_count: str | None = None
    resp_owner_data_info: str | None = None
    main_no: str | None = None
    sub_no: str | None = None
    detail_reg_no: str | None = None
    detail_regdate: str | None = None
    receipt_no: str | None = None
    main_chk: str | None = None
    gdetail_text: str | None = None
    eb_count: str | None = None
    resp_mortgage_data_info: str | None = None
    eb_no: str | None = None
    mortgage_no: str | None = None
    mortgagee_name: str | None = None
    mortgagee_addr: str | None = None
    mortgagor_name: str | None = None
    mortgagor_addr: str | None = None
    debtor_name: str | None = None
    debtor_addr: str | None = None
    bond_amount: str | None = None
    mortgage_date: str | None = None
    mortgage_erase: str | None = None
    mortgage_close: str | None = None
    ed1_count: str | None = None
    resp_mortgage_dt1_info: str | None = None
    rangking: str | None = None
    eb_detail_gb: str | None = None
    edetail_regdate: str | None = None
    edetail_text: str | None = None
    ed2_count: str | None = None
    resp_mortgage_dt2_info: str | None = None
    edetail_type: str | None = None
    edetail_carno: str | None = None
    edetail_setdate: str | None = None
    edetail_erase_date: str | None = None

class EquipmentCreate(EquipmentFields):
    vehicle_type: str = Field(alias="type", min_length=1, max_length=100)
    tonnage: str = Field(min_length=1, max_length=50)
    height: str = Field(min_length=1, max_length=50)

class EquipmentUpdate(EquipmentFields):
    vehicle_type: str | None = Field(None, alias="type", min_length=1, max_length=100)
    tonnage: str | None = Field(None, min_length=1, max_length=50)
    height: str | None = Field(None, min_length=1, max_length=50)

    @field_validator("vehicle_type", "tonnage", "height")
    @classmethod
    def _required_not_null(cls, v: str | None, info) -> str:
        if v is None:
            label = "Type" if info.field_name == "vehicle_type" else info.field_name.capitalize()
            raise ValueError(f"{label} is required")
        return v

class EquipmentOut(EquipmentFields):
    id: int
    user_id: int
    vehicle_type: str = Field(alias="type")
    tonnage: str
    height: str
    created_at: datetime
    updated_at: datetime
    user: MemberUserOut | None = None

class EquipmentListOut(CamelModel):
    equipment: list[EquipmentOut]
    pagination: Pagination


def envelope(message: str, data=None, status: int = 200) -> dict:
    return {"message": message, "status": status, "data": data}
