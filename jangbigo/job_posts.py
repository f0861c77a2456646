from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from . import access, models
from .config import settings
from .errors import ConflictError
from .models import JobPostCategory, JobPostType
from .schemas import JobPostCreate, JobPostUpdate
from .validation import validate_job_post

logger = logging.getLogger(__name__)


# --- Category payload ---
# In memory a post carries exactly one of these; the wide job_post row is
# only assembled at the storage boundary, with the other side's columns NULL.

@dataclass(frozen=True)
class SkyWork:
    equipment_type: str
    equipment_lengths: tuple[int, ...]


@dataclass(frozen=True)
class LadderWork:
    ladder_type: models.LadderType
    luggage_volume: str
    work_floor: int
    overall_height: int
    machine_type: str | None = None
    ladder_work_duration: str | None = None
    ladder_work_hours: int | None = None
    moving_fee: float | None = None
    on_site_fee: float | None = None


_CATEGORY_COLUMNS = tuple(f.name for f in fields(SkyWork)) + tuple(f.name for f in fields(LadderWork))

COMMON_COLUMNS = (
    "work_date_type",
    "work_date",
    "arrival_time",
    "work_schedule",
    "custom_hours",
    "work_cost",
    "is_night_work",
    "price_adjustment",
    "with_fee",
    "total_work_fee",
    "unit_price_fee",
    "community_work_fee",
    "community_support_fee",
    "payment_method",
    "expected_payment_date",
    "site_address",
    "contact_number",
    "work_contents",
    "delivery_info",
)


def work_payload(candidate: Mapping[str, Any]) -> SkyWork | LadderWork:
    if JobPostCategory(candidate["category"]) is JobPostCategory.SKY:
        return SkyWork(
            equipment_type=candidate["equipment_type"],
            equipment_lengths=tuple(candidate["equipment_lengths"]),
        )
    return LadderWork(**{f.name: candidate.get(f.name) for f in fields(LadderWork)})


def work_columns(work: SkyWork | LadderWork) -> dict[str, Any]:
    columns = dict.fromkeys(_CATEGORY_COLUMNS)
    columns.update(asdict(work))
    if isinstance(work, SkyWork):
        columns["equipment_lengths"] = list(work.equipment_lengths)
    return columns


def _snapshot(post: models.JobPost) -> dict[str, Any]:
    return {attr.key: getattr(post, attr.key) for attr in sa_inspect(models.JobPost).column_attrs}


def _common_columns(candidate: Mapping[str, Any]) -> dict[str, Any]:
    columns = {name: candidate.get(name) for name in COMMON_COLUMNS}
    columns["is_night_work"] = bool(columns["is_night_work"])
    return columns


def _apply_options(post: models.JobPost, options: Mapping[str, Any] | None) -> None:
    """Upsert the 1:1 options row; options only exist on LADDER posts."""
    if post.category is not JobPostCategory.LADDER:
        if post.options is not None:
            # delete-orphan removes the row
            post.options = None
        return
    if options is None:
        return
    row = post.options
    if row is None:
        row = models.JobPostOptions(dump_service=False)
        post.options = row
    for name, value in options.items():
        setattr(row, name, bool(value) if name == "dump_service" else value)


def _community_fees(db: Session, community_id: int, submitted: Mapping[str, Any]) -> tuple[float, float]:
    """Caller's fees, else the community defaults, else the configured fallbacks."""
    community = db.get(models.Community, community_id)
    work_fee = submitted.get("community_work_fee")
    support_fee = submitted.get("community_support_fee")
    if work_fee is None:
        work_fee = community.default_work_fee if community and community.default_work_fee is not None else None
    if support_fee is None:
        support_fee = community.default_support_fee if community and community.default_support_fee is not None else None
    if work_fee is None:
        work_fee = settings.DEFAULT_COMMUNITY_WORK_FEE
    if support_fee is None:
        support_fee = settings.DEFAULT_COMMUNITY_SUPPORT_FEE
    return work_fee, support_fee


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("job post %s rejected by the database: %s", action, exc.orig)
        raise ConflictError("Job post conflicts with existing data") from None


def create_job_post(db: Session, user_id: int, raw: Any) -> models.JobPost:
    payload, submitted = validate_job_post(JobPostCreate, raw)

    if payload.post_type is JobPostType.COMMUNITY:
        access.require_member(db, user_id, payload.community_id)
    elif payload.post_type is JobPostType.DESIGNATED:
        access.require_reachable(db, user_id, payload.designated_user_id)

    columns = _common_columns(submitted)
    if payload.post_type is JobPostType.COMMUNITY:
        columns["community_work_fee"], columns["community_support_fee"] = _community_fees(
            db, payload.community_id, submitted
        )

    post = models.JobPost(
        post_type=payload.post_type,
        category=payload.category,
        author_id=user_id,
        community_id=payload.community_id,
        designated_user_id=payload.designated_user_id,
        **columns,
        **work_columns(work_payload(submitted)),
    )
    db.add(post)
    _apply_options(post, submitted.get("options"))
    _commit(db, "create")
    db.refresh(post)
    logger.info("job post %s created by user %s (%s/%s)", post.id, user_id, post.post_type.value, post.category.value)
    return post


def _with_relations(stmt):
    return stmt.options(
        selectinload(models.JobPost.author),
        selectinload(models.JobPost.community),
        selectinload(models.JobPost.designated_user),
        selectinload(models.JobPost.options),
    )


def list_job_posts(
    db: Session,
    user_id: int,
    post_type: JobPostType | None = None,
    category: JobPostCategory | None = None,
    author_id: int | None = None,
    community_id: int | None = None,
) -> list[models.JobPost]:
    JobPost = models.JobPost
    community_ids = access.active_community_ids(db, user_id)
    stmt = select(JobPost).where(access.job_post_visibility(user_id, community_ids))
    if post_type is not None:
        stmt = stmt.where(JobPost.post_type == post_type)
    if category is not None:
        stmt = stmt.where(JobPost.category == category)
    if author_id is not None:
        stmt = stmt.where(JobPost.author_id == author_id)
    if community_id is not None:
        stmt = stmt.where(JobPost.community_id == community_id)
    stmt = _with_relations(stmt).order_by(JobPost.created_at.desc(), JobPost.id.desc())
    return list(db.execute(stmt).scalars())


def get_job_post(db: Session, job_post_id: int, user_id: int) -> models.JobPost | None:
    """The post if ``user_id`` may see it; hidden and missing look the same."""
    community_ids = access.active_community_ids(db, user_id)
    stmt = select(models.JobPost).where(
        models.JobPost.id == job_post_id,
        access.job_post_visibility(user_id, community_ids),
    )
    return db.execute(_with_relations(stmt)).scalar_one_or_none()


def _get_authored(db: Session, job_post_id: int, user_id: int) -> models.JobPost | None:
    post = db.get(models.JobPost, job_post_id)
    if post is None or post.author_id != user_id:
        return None
    return post


def update_job_post(db: Session, job_post_id: int, user_id: int, raw: Any) -> models.JobPost | None:
    post = _get_authored(db, job_post_id, user_id)
    if post is None:
        return None

    base = _snapshot(post)
    _, submitted = validate_job_post(JobPostUpdate, raw, base=base)
    candidate = {**base, **submitted}

    for name, value in _common_columns(candidate).items():
        setattr(post, name, value)
    post.category = candidate["category"]
    for name, value in work_columns(work_payload(candidate)).items():
        setattr(post, name, value)
    _apply_options(post, submitted.get("options"))
    post.updated_at = datetime.now(timezone.utc)

    _commit(db, "update")
    db.refresh(post)
    logger.info("job post %s updated by user %s", post.id, user_id)
    return post


def delete_job_post(db: Session, job_post_id: int, user_id: int) -> bool:
    post = _get_authored(db, job_post_id, user_id)
    if post is None:
        return False
    db.delete(post)
    db.commit()
    logger.info("job post %s deleted by user %s", job_post_id, user_id)
    return True
