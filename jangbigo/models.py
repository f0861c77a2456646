# jangbigo/models.py
from __future__ import annotations
import enum
from datetime import date, datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# --- Enums ---

class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"

class CommunityStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ARCHIVED = "ARCHIVED"

class CommunityRole(str, enum.Enum):
    # declaration order is the display rank in member listings
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    MEMBER = "MEMBER"

class JobPostType(str, enum.Enum):
    GLOBAL = "GLOBAL"
    COMMUNITY = "COMMUNITY"
    DESIGNATED = "DESIGNATED"

class JobPostCategory(str, enum.Enum):
    SKY = "SKY"
    LADDER = "LADDER"

class LadderType(str, enum.Enum):
    MOVING_GOODS = "MOVING_GOODS"
    ON_SITE = "ON_SITE"

class WorkDateType(str, enum.Enum):
    URGENT = "URGENT"
    TODAY = "TODAY"
    TOMORROW = "TOMORROW"
    CUSTOM_DATE = "CUSTOM_DATE"

class PaymentMethod(str, enum.Enum):
    SIGNATURE = "SIGNATURE"
    DIRECT_PAYMENT = "DIRECT_PAYMENT"
    CASH = "CASH"

class LoadingUnloadingService(str, enum.Enum):
    NONE = "NONE"
    LOADING = "LOADING"
    UNLOADING = "UNLOADING"
    BOTH = "BOTH"

class TravelDistance(str, enum.Enum):
    WITHIN_JURISDICTION = "WITHIN_JURISDICTION"
    OUTSIDE_JURISDICTION = "OUTSIDE_JURISDICTION"


# --- Users ---

class User(Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Kakao subject ids exceed 32 bits
    kakao_id: Mapped[int | None] = mapped_column(BigInteger, unique=True, index=True, nullable=True)
    # RFC 5321 cap is 320 chars
    email: Mapped[str | None] = mapped_column(String(320), unique=True, index=True, nullable=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole, name="user_role"), default=UserRole.USER, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    memberships: Mapped[list["CommunityMember"]] = relationship(
        back_populates="user",
        foreign_keys="CommunityMember.user_id",
        cascade="all, delete-orphan",
    )
    equipment: Mapped[list["Equipment"]] = relationship(back_populates="user", cascade="all, delete-orphan")


# --- Communities ---

class Community(Base):
    __tablename__ = "community"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    slug: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    status: Mapped[CommunityStatus] = mapped_column(
        Enum(CommunityStatus, name="community_status"), default=CommunityStatus.ACTIVE, nullable=False
    )
    is_private: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    max_members: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # percentages applied to COMMUNITY job posts that omit their own
    default_work_fee: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    default_support_fee: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    members: Mapped[list["CommunityMember"]] = relationship(
        back_populates="community", cascade="all, delete-orphan"
    )
    job_posts: Mapped[list["JobPost"]] = relationship(
        back_populates="community", cascade="all, delete-orphan"
    )


class CommunityMember(Base):
    __tablename__ = "community_member"
    # one row per (user, community); leaving flips is_active instead of deleting
    __table_args__ = (UniqueConstraint("user_id", "community_id", name="uq_community_member_user_community"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    community_id: Mapped[int] = mapped_column(ForeignKey("community.id", ondelete="CASCADE"), index=True, nullable=False)
    role: Mapped[CommunityRole] = mapped_column(
        Enum(CommunityRole, name="community_role"), default=CommunityRole.MEMBER, nullable=False
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    invited_by: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True)

    user: Mapped[User] = relationship(back_populates="memberships", foreign_keys=[user_id])
    inviter: Mapped[User | None] = relationship(foreign_keys=[invited_by])
    community: Mapped[Community] = relationship(back_populates="members")


# --- Job posts ---

class JobPost(Base):
    __tablename__ = "job_post"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    post_type: Mapped[JobPostType] = mapped_column("type", Enum(JobPostType, name="job_post_type"), nullable=False)
    category: Mapped[JobPostCategory] = mapped_column(Enum(JobPostCategory, name="job_post_category"), nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    community_id: Mapped[int | None] = mapped_column(ForeignKey("community.id", ondelete="CASCADE"), index=True, nullable=True)
    designated_user_id: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=True)

    # SKY
    equipment_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    equipment_lengths: Mapped[list | None] = mapped_column(JSON, nullable=True)

    # LADDER
    ladder_type: Mapped[LadderType | None] = mapped_column(Enum(LadderType, name="ladder_type"), nullable=True)
    machine_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    luggage_volume: Mapped[str | None] = mapped_column(String(20), nullable=True)
    work_floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    overall_height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ladder_work_duration: Mapped[str | None] = mapped_column(String(50), nullable=True)
    ladder_work_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)
    moving_fee: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    on_site_fee: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)

    # Scheduling
    work_date_type: Mapped[WorkDateType | None] = mapped_column(Enum(WorkDateType, name="work_date_type"), nullable=True)
    work_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    arrival_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    work_schedule: Mapped[str | None] = mapped_column(String(100), nullable=True)
    custom_hours: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Pricing
    work_cost: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    is_night_work: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    price_adjustment: Mapped[int | None] = mapped_column(Integer, nullable=True)
    with_fee: Mapped[bool] = mapped_column(Boolean, nullable=False)
    total_work_fee: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    unit_price_fee: Mapped[float | None] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=True)
    community_work_fee: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)
    community_support_fee: Mapped[float | None] = mapped_column(Numeric(5, 2, asdecimal=False), nullable=True)

    # Payment
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod, name="payment_method"), nullable=False)
    expected_payment_date: Mapped[str] = mapped_column(String(50), nullable=False)

    # Contact / details
    site_address: Mapped[str] = mapped_column(Text, nullable=False)
    contact_number: Mapped[str] = mapped_column(String(30), nullable=False)
    work_contents: Mapped[str | None] = mapped_column(Text, nullable=True)
    delivery_info: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    author: Mapped[User] = relationship(foreign_keys=[author_id])
    designated_user: Mapped[User | None] = relationship(foreign_keys=[designated_user_id])
    community: Mapped[Community | None] = relationship(back_populates="job_posts")
    options: Mapped["JobPostOptions | None"] = relationship(
        back_populates="job_post", cascade="all, delete-orphan", uselist=False
    )


class JobPostOptions(Base):
    __tablename__ = "job_post_options"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    job_post_id: Mapped[int] = mapped_column(
        ForeignKey("job_post.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    loading_unloading_service: Mapped[LoadingUnloadingService | None] = mapped_column(
        Enum(LoadingUnloadingService, name="loading_unloading_service"), nullable=True
    )
    travel_distance: Mapped[TravelDistance | None] = mapped_column(
        Enum(TravelDistance, name="travel_distance"), nullable=True
    )
    dump_service: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    job_post: Mapped[JobPost] = relationship(back_populates="options")


# list queries filter on visibility scope then sort by recency
Index("ix_job_post_type_created", JobPost.post_type, JobPost.created_at)


# --- Equipment ---

class Equipment(Base):
    """A vehicle registered by its owner, with the vehicle-registry lookup result."""

    __tablename__ = "equipment"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    vehicle_type: Mapped[str] = mapped_column("type", String(100), index=True, nullable=False)
    tonnage: Mapped[str] = mapped_column(String(50), nullable=False)
    length: Mapped[str | None] = mapped_column(Text, nullable=True)
    axle_length: Mapped[str | None] = mapped_column(Text, nullable=True)
    height: Mapped[str] = mapped_column(String(50), nullable=False)
    options: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Registry lookup result
    result_cd: Mapped[str | None] = mapped_column(Text, nullable=True)
    result_mg: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Registration: basic information
    car_regno: Mapped[str | None] = mapped_column(Text, nullable=True)
    adm_regno: Mapped[str | None] = mapped_column(Text, nullable=True)
    erase_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    car_vinary_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    mover_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    use: Mapped[str | None] = mapped_column(Text, nullable=True)
    model_year: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_gb: Mapped[str | None] = mapped_column(Text, nullable=True)
    first_reg_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    detail_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    product_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_owner: Mapped[str | None] = mapped_column(Text, nullable=True)
    regno: Mapped[str | None] = mapped_column(Text, nullable=True)
    locate_use: Mapped[str | None] = mapped_column(Text, nullable=True)
    check_exp_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    confirm_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    close_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    print_name: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Registration: ownership history
    gd_count: Mapped[str | None] = mapped_column(Text, nullable=True)
    resp_owner_data_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    sub_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    detail_reg_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    detail_regdate: Mapped[str | None] = mapped_column(Text, nullable=True)
    receipt_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_chk: Mapped[str | None] = mapped_column(Text, nullable=True)
    gdetail_text: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Mortgage
    eb_count: Mapped[str | None] = mapped_column(Text, nullable=True)
    resp_mortgage_data_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    eb_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgage_no: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgagee_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgagee_addr: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgagor_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgagor_addr: Mapped[str | None] = mapped_column(Text, nullable=True)
    debtor_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    debtor_addr: Mapped[str | None] = mapped_column(Text, nullable=True)
    bond_amount: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgage_date: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgage_erase: Mapped[str | None] = mapped_column(Text, nullable=True)
    mortgage_close: Mapped[str | None] = mapped_column(Text, nullable=True)
    ed1_count: Mapped[str | None] = mapped_column(Text, nullable=True)
    resp_mortgage_dt1_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    rangking: Mapped[str | None] = mapped_column(Text, nullable=True)
    eb_detail_gb: Mapped[str | None] = mapped_column(Text, nullable=True)
    edetail_regdate: Mapped[str | None] = mapped_column(Text, nullable=True)
    edetail_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    ed2_count: Mapped[str | None] = mapped_column(Text, nullable=True)
    resp_mortgage_dt2_info: Mapped[str | None] = mapped_column(Text, nullable=True)
    edetail_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    edetail_carno: Mapped[str | None] = mapped_column(Text, nullable=True)
    edetail_setdate: Mapped[str | None] = mapped_column(Text, nullable=True)
    edetail_erase_date: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    user: Mapped[User] = relationship(back_populates="equipment")
