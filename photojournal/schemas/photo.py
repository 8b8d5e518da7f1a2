from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import date, datetime
from dataclasses import dataclass


AdminScope = Literal["active", "trash"]


class PhotoRow(BaseModel):
    """A row exactly as the photos table returns it."""
    id: str
    title: str
    caption: str | None = None
    tags: List[str] | None = None
    shot_date: date
    image_path: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class Photo(BaseModel):
    id: str
    title: str
    caption: str | None = None
    tags: List[str] = Field(default_factory=list)
    shot_date: date
    image_path: str
    image_url: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class PhotoMetadataIn(BaseModel):
    title: str
    caption: Optional[str] = ""
    tags: List[str] = Field(default_factory=list)
    shot_date: date


class AdminPhotos(BaseModel):
    active: List[Photo]
    trash: List[Photo]


class PhotoPage(BaseModel):
    page: int
    limit: int
    photos: List[Photo]
    has_more: bool


@dataclass
class ImageFile:
    filename: str
    data: bytes
    content_type: str = "application/octet-stream"
