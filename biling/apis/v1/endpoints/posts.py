from typing import List, Optional

from fastapi import (
    APIRouter, Depends, status, Response,
    File, UploadFile, Form, Query,
)
from sqlalchemy.orm import Session

from biling import schemas
from biling.database import get_db
from biling.dependencies import get_current_user_id
from biling.services import post_service

router = APIRouter()


@router.get("", response_model=List[schemas.PostPreview])
def read_filtered_posts(
    post_type: str = Query(..., alias="type"),
    category: Optional[str] = None,
    radius: Optional[str] = None,
    keyword: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Browse active posts of one type, optionally narrowed by category ("ALL" for every
    category), radius around your saved location ("3km", "unlimited", ...) and a title keyword.
    """
    return post_service.get_filtered_posts(
        db,
        post_type=post_type,
        viewer_id=current_user_id,
        category=category,
        radius=radius,
        keyword=keyword,
    )


@router.post("", status_code=status.HTTP_204_NO_CONTENT)
async def create_post(
    post_type: str = Form(..., alias="type"),
    title: str = Form(..., min_length=1, max_length=100),
    price: int = Form(..., ge=0),
    distance: str = Form(...),
    category: str = Form(...),
    location_latitude: float = Form(..., ge=-90, le=90),
    location_longitude: float = Form(..., ge=-180, le=180),
    content: Optional[str] = Form(None),
    location_name: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
) -> Response:
    fields = schemas.PostCreate(
        type=post_type,
        title=title,
        price=price,
        content=content,
        distance=distance,
        category=category,
        location_name=location_name,
        location_latitude=location_latitude,
        location_longitude=location_longitude,
    )
    await post_service.create_post(db, writer_id=current_user_id, fields=fields, images=images)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}", response_model=schemas.PostDetail)
def read_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return post_service.get_post_detail(db, post_id=post_id, viewer_id=current_user_id)


@router.patch("/{post_id}/status", response_model=schemas.PostPreview)
def update_post_status(
    post_id: int,
    status_in: schemas.PostStatusUpdate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    post = post_service.update_post_status(
        db, post_id=post_id, actor_id=current_user_id, status=status_in.status)
    return post_service.to_preview(post)
