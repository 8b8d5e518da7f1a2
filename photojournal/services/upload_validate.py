from fastapi import HTTPException, UploadFile

from photojournal.config import settings
from photojournal.schemas.photo import ImageFile


async def read_upload(file: UploadFile) -> ImageFile:
    """Read an uploaded blob, rejecting empty or oversized files."""
    max_size = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    content = await file.read()
    if not content:
        raise HTTPException(400, "Empty file")
    if len(content) > max_size:
        raise HTTPException(413, f"File too large (max {settings.MAX_UPLOAD_SIZE_MB}MB)")

    return ImageFile(
        filename=file.filename or "image",
        data=content,
        content_type=file.content_type or "application/octet-stream",
    )
