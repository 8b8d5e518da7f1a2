# photojournal/routers/photos.py

from fastapi import APIRouter, Depends, Query

from photojournal.config import settings
from photojournal.schemas.photo import PhotoPage
from photojournal.services.photos import PhotoRepository
from photojournal.services.security import public_repository

router = APIRouter(prefix="/photos", tags=["photos"])


@router.get("", response_model=PhotoPage)
async def list_photos(
    page: int = Query(0, ge=0),
    limit: int | None = Query(None, ge=1, le=100),
    repo: PhotoRepository = Depends(public_repository),
):
    """Public feed, newest shot first. `has_more` is false once a short page comes back."""
    size = limit or settings.PAGE_SIZE
    photos = await repo.list_public(page * size, size)
    return PhotoPage(page=page, limit=size, photos=photos, has_more=len(photos) == size)
