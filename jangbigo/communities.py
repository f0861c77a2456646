from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timezone

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from . import access, models
from .errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .models import CommunityRole, CommunityStatus
from .schemas import CommunityCreate, CommunityUpdate, InviteUserIn, UpdateMemberRoleIn

logger = logging.getLogger(__name__)

CM = models.CommunityMember

SLUG_MAX_LENGTH = 50
SLUG_TAKEN = "Community slug already exists"
ALREADY_MEMBER = "User is already a member of this community"
NOT_MEMBER = "User is not a member of this community"


def generate_slug(title: str) -> str:
    """Lowercase ascii slug from ``title``; random when nothing survives."""
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug.strip())
    slug = re.sub(r"-+", "-", slug).strip("-")[:SLUG_MAX_LENGTH].strip("-")
    return slug or f"community-{secrets.token_hex(4)}"


def _member_counts():
    return (
        select(CM.community_id, func.count(CM.id).label("member_count"))
        .where(CM.is_active.is_(True))
        .group_by(CM.community_id)
        .subquery()
    )


def _slug_taken(db: Session, slug: str, exclude_id: int | None = None) -> bool:
    stmt = select(models.Community.id).where(models.Community.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(models.Community.id != exclude_id)
    return db.execute(stmt).first() is not None


def _commit(db: Session, message: str, field: str | None = None) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("community write rejected by the database: %s", exc.orig)
        raise ConflictError(message, field=field) from None


def _require_community(db: Session, community_id: int) -> models.Community:
    community = db.get(models.Community, community_id)
    if community is None:
        raise NotFoundError("Community not found")
    return community


# --- Communities ---

def create_community(db: Session, user_id: int, data: CommunityCreate) -> tuple[models.Community, int]:
    slug = data.slug or generate_slug(data.title)
    if _slug_taken(db, slug):
        raise ConflictError(SLUG_TAKEN, field="slug")

    community = models.Community(
        title=data.title,
        description=data.description,
        slug=slug,
        status=data.status or CommunityStatus.ACTIVE,
        is_private=bool(data.is_private),
        max_members=data.max_members,
        default_work_fee=data.default_work_fee,
        default_support_fee=data.default_support_fee,
    )
    community.members.append(CM(user_id=user_id, role=CommunityRole.OWNER, is_active=True))
    db.add(community)
    _commit(db, SLUG_TAKEN, field="slug")
    db.refresh(community)
    logger.info("community %s (%s) created by user %s", community.id, community.slug, user_id)
    return community, 1


def list_communities(
    db: Session,
    status: CommunityStatus | None = None,
    is_private: bool | None = None,
    search: str | None = None,
) -> list[tuple[models.Community, int]]:
    counts = _member_counts()
    stmt = select(models.Community, func.coalesce(counts.c.member_count, 0)).outerjoin(
        counts, counts.c.community_id == models.Community.id
    )
    if status is not None:
        stmt = stmt.where(models.Community.status == status)
    if is_private is not None:
        stmt = stmt.where(models.Community.is_private.is_(is_private))
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(models.Community.title.ilike(pattern), models.Community.description.ilike(pattern))
        )
    stmt = stmt.order_by(models.Community.created_at.desc(), models.Community.id.desc())
    return [(community, count) for community, count in db.execute(stmt).all()]


def count_members(db: Session, community_id: int) -> int:
    return db.execute(
        select(func.count(CM.id)).where(CM.community_id == community_id, CM.is_active.is_(True))
    ).scalar_one()


def get_community(db: Session, community_id: int) -> tuple[models.Community, int] | None:
    community = db.get(models.Community, community_id)
    if community is None:
        return None
    return community, count_members(db, community_id)


def update_community(
    db: Session, community_id: int, user_id: int, data: CommunityUpdate
) -> tuple[models.Community, int]:
    community = _require_community(db, community_id)
    access.require_role(
        db, user_id, community_id, access.MANAGER_ROLES, "Insufficient permissions to update community"
    )
    changes = data.model_dump(exclude_unset=True)
    if changes.get("slug") and _slug_taken(db, changes["slug"], exclude_id=community_id):
        raise ConflictError(SLUG_TAKEN, field="slug")
    for name in ("title", "slug", "status", "is_private"):
        # nullable=False columns: an explicit null means "leave as is"
        if changes.get(name) is None:
            changes.pop(name, None)
    for name, value in changes.items():
        setattr(community, name, value)
    community.updated_at = datetime.now(timezone.utc)
    _commit(db, SLUG_TAKEN, field="slug")
    db.refresh(community)
    logger.info("community %s updated by user %s", community_id, user_id)
    return community, count_members(db, community_id)


def delete_community(db: Session, community_id: int, user_id: int) -> None:
    community = _require_community(db, community_id)
    access.require_role(
        db, user_id, community_id, (CommunityRole.OWNER,), "Only community owner can delete the community"
    )
    db.delete(community)
    db.commit()
    logger.info("community %s deleted by user %s", community_id, user_id)


# --- Membership ---

def _find_membership(db: Session, user_id: int, community_id: int) -> models.CommunityMember | None:
    """The (user, community) row whether active or not."""
    return db.execute(
        select(CM).where(CM.user_id == user_id, CM.community_id == community_id)
    ).scalar_one_or_none()


def _activate(
    db: Session,
    community: models.Community,
    user_id: int,
    role: CommunityRole,
    invited_by: int | None,
) -> models.CommunityMember:
    """Insert or reactivate the membership row; caller holds the community lock."""
    membership = _find_membership(db, user_id, community.id)
    if membership is not None and membership.is_active:
        raise ConflictError(ALREADY_MEMBER)
    access.ensure_capacity(db, community)
    if membership is None:
        membership = CM(user_id=user_id, community_id=community.id)
        db.add(membership)
    membership.is_active = True
    membership.role = role
    membership.invited_by = invited_by
    membership.joined_at = datetime.now(timezone.utc)
    _commit(db, ALREADY_MEMBER)
    db.refresh(membership)
    return membership


def join_community(db: Session, user_id: int, community_id: int) -> models.CommunityMember:
    community = access.get_community_for_update(db, community_id)
    membership = _activate(db, community, user_id, CommunityRole.MEMBER, invited_by=None)
    logger.info("user %s joined community %s", user_id, community_id)
    return membership


def leave_community(db: Session, user_id: int, community_id: int) -> None:
    membership = access.get_active_membership(db, user_id, community_id)
    if membership is None:
        raise NotFoundError(NOT_MEMBER)
    if membership.role is CommunityRole.OWNER:
        raise ForbiddenError(
            "Community owner cannot leave the community. Transfer ownership or delete the community instead."
        )
    membership.is_active = False
    db.commit()
    logger.info("user %s left community %s", user_id, community_id)


def invite_user(db: Session, user_id: int, data: InviteUserIn) -> models.CommunityMember:
    community = access.get_community_for_update(db, data.community_id)
    inviter = access.require_role(
        db, user_id, community.id, access.INVITER_ROLES, "Insufficient permissions to invite users"
    )
    role = data.role or CommunityRole.MEMBER
    if role is CommunityRole.OWNER:
        raise ValidationError.single("role", "Cannot invite a user as owner")
    if role is CommunityRole.ADMIN and inviter.role is not CommunityRole.OWNER:
        raise ForbiddenError("Only owners can invite admins")
    if db.get(models.User, data.user_id) is None:
        raise NotFoundError("User not found")

    membership = _activate(db, community, data.user_id, role, invited_by=user_id)
    logger.info("user %s invited user %s to community %s as %s", user_id, data.user_id, community.id, role.value)
    return membership


def _role_rank():
    return case(*[(CM.role == role, rank) for rank, role in enumerate(CommunityRole)], else_=len(CommunityRole))


def _member_relations(stmt):
    return stmt.options(selectinload(CM.user), selectinload(CM.inviter), selectinload(CM.community))


def list_members(db: Session, community_id: int, user_id: int) -> list[models.CommunityMember]:
    _require_community(db, community_id)
    access.require_member(db, user_id, community_id)
    stmt = (
        select(CM)
        .where(CM.community_id == community_id, CM.is_active.is_(True))
        .order_by(_role_rank(), CM.joined_at.desc(), CM.id.desc())
    )
    return list(db.execute(_member_relations(stmt)).scalars())


def _require_target(db: Session, target_user_id: int, community_id: int) -> models.CommunityMember:
    target = access.get_active_membership(db, target_user_id, community_id)
    if target is None:
        raise NotFoundError(NOT_MEMBER)
    return target


def update_member_role(
    db: Session, community_id: int, user_id: int, data: UpdateMemberRoleIn
) -> models.CommunityMember:
    _require_community(db, community_id)
    actor = access.require_role(
        db, user_id, community_id, access.MANAGER_ROLES, "Insufficient permissions to update member roles"
    )
    target = _require_target(db, data.user_id, community_id)
    access.check_role_change(actor, target, data.role)
    target.role = data.role
    db.commit()
    db.refresh(target)
    logger.info("user %s set role of user %s in community %s to %s", user_id, data.user_id, community_id, data.role.value)
    return target


def remove_member(db: Session, community_id: int, user_id: int, target_user_id: int) -> None:
    _require_community(db, community_id)
    actor = access.require_role(
        db, user_id, community_id, access.MANAGER_ROLES, "Insufficient permissions to remove members"
    )
    target = _require_target(db, target_user_id, community_id)
    access.check_role_change(actor, target, None)
    target.is_active = False
    db.commit()
    logger.info("user %s removed user %s from community %s", user_id, target_user_id, community_id)


# --- Per-user views ---

def list_user_communities(
    db: Session, user_id: int
) -> list[tuple[models.Community, models.CommunityMember, int]]:
    """Active memberships of ``user_id``, newest join first."""
    counts = _member_counts()
    stmt = (
        select(models.Community, CM, func.coalesce(counts.c.member_count, 0))
        .join(CM, CM.community_id == models.Community.id)
        .outerjoin(counts, counts.c.community_id == models.Community.id)
        .where(CM.user_id == user_id, CM.is_active.is_(True))
        .order_by(CM.joined_at.desc(), CM.id.desc())
    )
    return [(community, membership, count) for community, membership, count in db.execute(stmt).all()]


def list_designation_candidates(
    db: Session, user_id: int, community_id: int | None = None
) -> list[models.CommunityMember]:
    """Users the caller may designate: one membership row per reachable user.

    With ``community_id`` the search is restricted to that community, which
    the caller must belong to.
    """
    if community_id is not None:
        _require_community(db, community_id)
        access.require_member(db, user_id, community_id)
        community_ids = [community_id]
    else:
        community_ids = access.active_community_ids(db, user_id)
    if not community_ids:
        return []

    stmt = (
        select(CM)
        .join(models.User, models.User.id == CM.user_id)
        .where(
            CM.community_id.in_(community_ids),
            CM.user_id != user_id,
            CM.is_active.is_(True),
        )
        .order_by(models.User.name.asc(), CM.joined_at.desc(), CM.id.desc())
    )
    seen: set[int] = set()
    candidates = []
    for membership in db.execute(_member_relations(stmt)).scalars():
        if membership.user_id in seen:
            continue
        seen.add(membership.user_id)
        candidates.append(membership)
    return candidates
