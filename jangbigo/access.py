"""
Who may see or touch what.

Visibility of job posts is expressed as a single SQL clause so that list
and detail queries never load a row the caller is not allowed to see.
"""
from __future__ import annotations

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from . import models
from .errors import ConflictError, ForbiddenError, NotFoundError
from .models import CommunityRole, JobPostType

MANAGER_ROLES = (CommunityRole.OWNER, CommunityRole.ADMIN)
INVITER_ROLES = (CommunityRole.OWNER, CommunityRole.ADMIN, CommunityRole.MODERATOR)


def active_community_ids(db: Session, user_id: int) -> list[int]:
    rows = db.execute(
        select(models.CommunityMember.community_id).where(
            models.CommunityMember.user_id == user_id,
            models.CommunityMember.is_active.is_(True),
        )
    ).scalars()
    return list(rows)


def get_active_membership(db: Session, user_id: int, community_id: int) -> models.CommunityMember | None:
    return db.execute(
        select(models.CommunityMember).where(
            models.CommunityMember.user_id == user_id,
            models.CommunityMember.community_id == community_id,
            models.CommunityMember.is_active.is_(True),
        )
    ).scalar_one_or_none()


def job_post_visibility(user_id: int, community_ids: list[int]):
    """GLOBAL, or COMMUNITY in one of ``community_ids``, or DESIGNATED to/from the user."""
    JobPost = models.JobPost
    return or_(
        JobPost.post_type == JobPostType.GLOBAL,
        and_(JobPost.post_type == JobPostType.COMMUNITY, JobPost.community_id.in_(community_ids)),
        and_(
            JobPost.post_type == JobPostType.DESIGNATED,
            or_(JobPost.designated_user_id == user_id, JobPost.author_id == user_id),
        ),
    )


def require_member(db: Session, user_id: int, community_id: int) -> models.CommunityMember:
    membership = get_active_membership(db, user_id, community_id)
    if membership is None:
        raise ForbiddenError("User is not a member of this community")
    return membership


def require_role(
    db: Session, user_id: int, community_id: int, roles: tuple[CommunityRole, ...], message: str
) -> models.CommunityMember:
    membership = get_active_membership(db, user_id, community_id)
    if membership is None or membership.role not in roles:
        raise ForbiddenError(message)
    return membership


def is_reachable(db: Session, user_id: int, target_user_id: int) -> bool:
    """True when both users are active members of at least one common community."""
    mine = select(models.CommunityMember.community_id).where(
        models.CommunityMember.user_id == user_id,
        models.CommunityMember.is_active.is_(True),
    )
    shared = db.execute(
        select(models.CommunityMember.id)
        .where(
            models.CommunityMember.user_id == target_user_id,
            models.CommunityMember.is_active.is_(True),
            models.CommunityMember.community_id.in_(mine),
        )
        .limit(1)
    ).first()
    return shared is not None


def require_reachable(db: Session, user_id: int, target_user_id: int) -> None:
    if not is_reachable(db, user_id, target_user_id):
        raise ForbiddenError("Designated user is not accessible (not in any shared communities)")


def check_role_change(
    actor: models.CommunityMember, target: models.CommunityMember, new_role: CommunityRole | None
) -> None:
    """Rules shared by role updates (``new_role`` set) and removals (``None``).

    The owner is untouchable, only the owner may act on admins, and only the
    owner may hand out the admin role.
    """
    verb = "change" if new_role is not None else "remove"
    if target.role is CommunityRole.OWNER:
        raise ForbiddenError("Cannot change owner role" if new_role is not None else "Cannot remove community owner")
    if target.role is CommunityRole.ADMIN and actor.role is not CommunityRole.OWNER:
        raise ForbiddenError(f"Only owners can {verb} admins")
    if new_role is CommunityRole.OWNER:
        raise ForbiddenError("Owner role cannot be assigned")
    if new_role is CommunityRole.ADMIN and actor.role is not CommunityRole.OWNER:
        raise ForbiddenError("Only owners can promote users to admin")


def ensure_capacity(db: Session, community: models.Community) -> None:
    """Raise when ``community`` already holds ``max_members`` active members."""
    if not community.max_members:
        return
    count = db.execute(
        select(func.count(models.CommunityMember.id)).where(
            models.CommunityMember.community_id == community.id,
            models.CommunityMember.is_active.is_(True),
        )
    ).scalar_one()
    if count >= community.max_members:
        raise ConflictError("Community has reached maximum member limit")


def get_community_for_update(db: Session, community_id: int) -> models.Community:
    # row lock serializes concurrent joins against the member cap (no-op on SQLite)
    community = db.execute(
        select(models.Community).where(models.Community.id == community_id).with_for_update()
    ).scalar_one_or_none()
    if community is None:
        raise NotFoundError("Community not found")
    return community
