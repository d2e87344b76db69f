# biling/schemas.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from .models import PostType, Category, PostStatus


# --- User Schemas ---


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nickname: str
    profile_image: Optional[str] = None
    location_latitude: Optional[float] = None
    location_longitude: Optional[float] = None


class LocationUpdate(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# --- Post Schemas ---


class PostCreate(BaseModel):
    """Fields of a new post as they arrive over the wire.

    ``type``, ``category`` and ``distance`` stay free text here; the service
    parses them against their enums so unknown values surface as a 400.
    """

    type: str
    title: str = Field(..., min_length=1, max_length=100)
    price: int = Field(..., ge=0)
    content: Optional[str] = None
    distance: str
    category: str
    location_name: Optional[str] = None
    location_latitude: float = Field(..., ge=-90, le=90)
    location_longitude: float = Field(..., ge=-180, le=180)


class PostStatusUpdate(BaseModel):
    status: str


class PostPreview(BaseModel):
    post_id: int
    title: str
    price: int
    preview_image: Optional[str] = None
    location_name: Optional[str] = None
    post_type: PostType
    post_status: PostStatus


class UserPostPreview(PostPreview):
    review_id: Optional[int] = None


class PostDetail(BaseModel):
    is_owner: bool
    writer_id: int
    writer_nickname: str
    writer_profile_image: str = ""
    category: Category
    distance: str
    title: str
    created_at: datetime
    content: Optional[str] = None
    price: int
    location_name: Optional[str] = None
    location_latitude: float
    location_longitude: float
    post_type: PostType
    post_status: PostStatus
    image_urls: List[str] = []


class ErrorResponse(BaseModel):
    detail: str
    reason: str
