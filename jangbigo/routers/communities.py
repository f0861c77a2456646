"""Community and membership endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import communities, models
from ..auth import get_current_user
from ..database import get_db
from ..models import CommunityStatus
from ..schemas import (
    CommunityCreate,
    CommunityOut,
    CommunityUpdate,
    Envelope,
    InviteUserIn,
    JoinCommunityIn,
    MemberOut,
    MyCommunityOut,
    UpdateMemberRoleIn,
    envelope,
)

router = APIRouter(prefix="/communities", tags=["communities"])


def community_out(community: models.Community, member_count: int) -> CommunityOut:
    return CommunityOut.model_validate(community).model_copy(update={"member_count": member_count})


def my_community_out(
    community: models.Community, membership: models.CommunityMember, member_count: int
) -> MyCommunityOut:
    return MyCommunityOut(
        **community_out(community, member_count).model_dump(),
        role=membership.role,
        joined_at=membership.joined_at,
    )


@router.post("", response_model=Envelope[CommunityOut], status_code=status.HTTP_201_CREATED)
def create_community(
    payload: CommunityCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    community, count = communities.create_community(db, current_user.id, payload)
    return envelope("Community created successfully", community_out(community, count), status.HTTP_201_CREATED)


@router.get("", response_model=Envelope[list[CommunityOut]])
def list_communities(
    community_status: CommunityStatus | None = Query(None, alias="status"),
    is_private: bool | None = Query(None, alias="isPrivate"),
    search: str | None = Query(None, max_length=100),
    db: Session = Depends(get_db),
    _: models.User = Depends(get_current_user),
):
    rows = communities.list_communities(db, status=community_status, is_private=is_private, search=search)
    return envelope("Communities retrieved successfully", [community_out(c, n) for c, n in rows])


@router.get("/user", response_model=Envelope[list[MyCommunityOut]])
def my_communities(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    rows = communities.list_user_communities(db, current_user.id)
    return envelope("User communities retrieved successfully", [my_community_out(*row) for row in rows])


@router.get("/users/all", response_model=Envelope[list[MemberOut]])
def reachable_users(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """Everyone sharing at least one community with the caller, once each."""
    members = communities.list_designation_candidates(db, current_user.id)
    return envelope("Users retrieved successfully", [MemberOut.model_validate(m) for m in members])


@router.post("/join", response_model=Envelope[MemberOut], status_code=status.HTTP_201_CREATED)
def join_community(
    payload: JoinCommunityIn,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    membership = communities.join_community(db, current_user.id, payload.community_id)
    return envelope("Successfully joined community", MemberOut.model_validate(membership), status.HTTP_201_CREATED)


@router.post("/invite", response_model=Envelope[MemberOut], status_code=status.HTTP_201_CREATED)
def invite_user(
    payload: InviteUserIn,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    membership = communities.invite_user(db, current_user.id, payload)
    return envelope("User invited successfully", MemberOut.model_validate(membership), status.HTTP_201_CREATED)


@router.get("/{community_id}", response_model=Envelope[CommunityOut])
def get_community(
    community_id: int,
    db: Session = Depends(get_db),
    _: models.User = Depends(get_current_user),
):
    found = communities.get_community(db, community_id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Community not found")
    return envelope("Community retrieved successfully", community_out(*found))


@router.put("/{community_id}", response_model=Envelope[CommunityOut])
def update_community(
    community_id: int,
    payload: CommunityUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    community, count = communities.update_community(db, community_id, current_user.id, payload)
    return envelope("Community updated successfully", community_out(community, count))


@router.delete("/{community_id}", response_model=Envelope[None])
def delete_community(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    communities.delete_community(db, community_id, current_user.id)
    return envelope("Community deleted successfully")


@router.post("/{community_id}/leave", response_model=Envelope[None])
def leave_community(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    communities.leave_community(db, current_user.id, community_id)
    return envelope("Successfully left community")


@router.get("/{community_id}/members", response_model=Envelope[list[MemberOut]])
def list_members(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    members = communities.list_members(db, community_id, current_user.id)
    return envelope("Community members retrieved successfully", [MemberOut.model_validate(m) for m in members])


@router.put("/{community_id}/members/role", response_model=Envelope[MemberOut])
def update_member_role(
    community_id: int,
    payload: UpdateMemberRoleIn,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    membership = communities.update_member_role(db, community_id, current_user.id, payload)
    return envelope("Member role updated successfully", MemberOut.model_validate(membership))


@router.delete("/{community_id}/members/{user_id}", response_model=Envelope[None])
def remove_member(
    community_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    communities.remove_member(db, community_id, current_user.id, user_id)
    return envelope("Member removed successfully")
