from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from biling import schemas
from biling.database import get_db
from biling.dependencies import get_current_user_id
from biling.services import post_service

router = APIRouter()


@router.get("/me/posts", response_model=List[schemas.UserPostPreview])
def read_my_posts(
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return post_service.get_posts_by_user(db, owner_id=current_user_id)


@router.put("/me/location", response_model=schemas.User)
def update_my_location(
    location_in: schemas.LocationUpdate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """
    Save where you are now. Radius filters on the post list are measured from here.
    """
    return post_service.update_my_location(
        db, user_id=current_user_id,
        latitude=location_in.latitude, longitude=location_in.longitude)


@router.get("/{user_id}/posts", response_model=List[schemas.UserPostPreview])
def read_user_posts(
    user_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return post_service.get_posts_by_user(db, owner_id=user_id)
