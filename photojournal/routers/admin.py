# photojournal/routers/admin.py
import logging
from datetime import date

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile, status

from photojournal.core.rate_limit import limiter
from photojournal.schemas.auth import LoginPayload, TokenOut
from photojournal.schemas.photo import AdminScope, Photo, PhotoMetadataIn
from photojournal.services.backend import get_access_client
from photojournal.services.photos import PhotoRepository, parse_tags
from photojournal.services.security import admin_repository, require_token
from photojournal.services.upload_validate import read_upload

log = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _require_title(title: str) -> None:
    if not title.strip():
        raise HTTPException(status_code=422, detail="Title is required")


@router.post("/session", response_model=TokenOut)
@limiter.limit("10/minute")
async def sign_in(request: Request, payload: LoginPayload):
    session = await get_access_client().sign_in_with_password(payload.email, payload.password)
    log.info("Admin session opened for %s", session.user_id)
    return TokenOut(
        access_token=session.access_token,
        expires_in=session.expires_in,
        user_id=session.user_id,
        email=session.email,
    )


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(token: str = Depends(require_token)):
    await get_access_client().with_access_token(token).sign_out()


@router.get("/photos")
async def list_admin_photos(
    scope: AdminScope | None = Query(None),
    repo: PhotoRepository = Depends(admin_repository),
):
    """Both lists at once, or a single scope when `scope` is given."""
    if scope is None:
        return await repo.list_admin_all()
    return await repo.list_admin(scope)


@router.post("/photos", response_model=Photo, status_code=status.HTTP_201_CREATED)
async def upload_photo(
    file: UploadFile = File(...),
    title: str = Form(...),
    shot_date: date = Form(...),
    caption: str = Form(""),
    tags: str = Form(""),
    token: str = Depends(require_token),
    repo: PhotoRepository = Depends(admin_repository),
):
    _require_title(title)
    image = await read_upload(file)

    user = await get_access_client().with_access_token(token).get_user()
    owner_id = str(user.get("id") or "")
    if not owner_id:
        raise HTTPException(status_code=401, detail="Not signed in")

    metadata = PhotoMetadataIn(title=title, caption=caption, tags=parse_tags(tags), shot_date=shot_date)
    return await repo.create(image, metadata, owner_id)


@router.patch("/photos/{photo_id}", response_model=Photo)
async def update_photo(
    photo_id: str,
    metadata: PhotoMetadataIn,
    repo: PhotoRepository = Depends(admin_repository),
):
    _require_title(metadata.title)
    return await repo.update(photo_id, metadata)


@router.post("/photos/{photo_id}/trash", status_code=status.HTTP_204_NO_CONTENT)
async def trash_photo(photo_id: str, repo: PhotoRepository = Depends(admin_repository)):
    await repo.soft_delete(photo_id)


@router.post("/photos/{photo_id}/restore", status_code=status.HTTP_204_NO_CONTENT)
async def restore_photo(photo_id: str, repo: PhotoRepository = Depends(admin_repository)):
    await repo.restore(photo_id)


@router.delete("/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(photo_id: str, repo: PhotoRepository = Depends(admin_repository)):
    """Permanently remove the image and its row. Cannot be undone."""
    photo = await repo.get(photo_id)
    await repo.permanent_delete(photo)
