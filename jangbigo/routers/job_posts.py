"""Job post endpoints.

Create and update take the raw JSON object: structural and cross-field
validation run together in ``validation.validate_job_post`` so that one
response lists every problem with the request.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from .. import communities, job_posts, models
from ..auth import get_current_user
from ..database import get_db
from ..models import JobPostCategory, JobPostType
from ..schemas import (
    Envelope,
    JobPostOut,
    MemberOut,
    MyCommunityOut,
    envelope,
)
from .communities import my_community_out

router = APIRouter(prefix="/job-posts", tags=["job-posts"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job post not found")


@router.get("/communities/user", response_model=Envelope[list[MyCommunityOut]])
def my_communities(
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """Communities the caller can post into."""
    rows = communities.list_user_communities(db, current_user.id)
    return envelope("User communities retrieved successfully", [my_community_out(*row) for row in rows])


@router.get("/communities/{community_id}/users", response_model=Envelope[list[MemberOut]])
def community_users(
    community_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    """Members of one community the caller may designate."""
    members = communities.list_designation_candidates(db, current_user.id, community_id)
    return envelope("Community users retrieved successfully", [MemberOut.model_validate(m) for m in members])


@router.post(
    "",
    response_model=Envelope[JobPostOut],
    status_code=status.HTTP_201_CREATED,
)
def create_job_post(
    body: dict[str, Any] = Body(..., description="Job post fields, camelCase, with `type` and `category`"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    post = job_posts.create_job_post(db, current_user.id, body)
    return envelope("Job post created successfully", JobPostOut.model_validate(post), status.HTTP_201_CREATED)


@router.get("", response_model=Envelope[list[JobPostOut]])
def list_job_posts(
    post_type: JobPostType | None = Query(None, alias="type"),
    category: JobPostCategory | None = Query(None),
    author_id: int | None = Query(None, alias="authorId"),
    community_id: int | None = Query(None, alias="communityId"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    posts = job_posts.list_job_posts(
        db,
        current_user.id,
        post_type=post_type,
        category=category,
        author_id=author_id,
        community_id=community_id,
    )
    return envelope("Job posts retrieved successfully", [JobPostOut.model_validate(p) for p in posts])


@router.get("/{job_post_id}", response_model=Envelope[JobPostOut])
def get_job_post(
    job_post_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    post = job_posts.get_job_post(db, job_post_id, current_user.id)
    if post is None:
        raise _not_found()
    return envelope("Job post retrieved successfully", JobPostOut.model_validate(post))


@router.put("/{job_post_id}", response_model=Envelope[JobPostOut])
def update_job_post(
    job_post_id: int,
    body: dict[str, Any] = Body(..., description="Job post fields to change"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    post = job_posts.update_job_post(db, job_post_id, current_user.id, body)
    if post is None:
        raise _not_found()
    return envelope("Job post updated successfully", JobPostOut.model_validate(post))


@router.delete("/{job_post_id}", response_model=Envelope[None])
def delete_job_post(
    job_post_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    if not job_posts.delete_job_post(db, job_post_id, current_user.id):
        raise _not_found()
    return envelope("Job post deleted successfully")
