from fastapi import APIRouter

from .admin import router as admin_router
from .health import router as health_router
from .photos import router as photos_router


def build_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health_router)
    router.include_router(photos_router)
    router.include_router(admin_router)
    return router


router = build_router()
