"""API v1 router aggregation."""

from fastapi import APIRouter

from .auth import router as auth_router
from .communities import router as communities_router
from .equipment import router as equipment_router
from .job_posts import router as job_posts_router
from .users import router as users_router

router = APIRouter(prefix="/api/v1")

router.include_router(auth_router)
router.include_router(users_router)
router.include_router(job_posts_router)
router.include_router(communities_router)
router.include_router(equipment_router)
