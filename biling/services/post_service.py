# biling/services/post_service.py
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from biling import crud, models, schemas
from biling.core.config import settings
from biling.errors import ForbiddenError, InvalidValueError, NotFoundError
from biling.helper import media_uploader
from biling.helper.post_filter import (
    filter_posts,
    newest_first,
    parse_category,
    parse_enum,
    parse_post_type,
    parse_radius,
    representative_image,
)

logger = logging.getLogger(__name__)


# --- Helper Utilities ---

def _get_user_or_404(db: Session, user_id: int) -> models.User:
    user = crud.get_user(db, user_id=user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found", reason="user_not_found")
    return user


def _get_post_or_404(db: Session, post_id: int) -> models.Post:
    post = crud.get_post(db, post_id=post_id)
    if not post:
        raise NotFoundError(f"Post {post_id} not found", reason="post_not_found")
    return post


def _parse_distance(value: str) -> models.Distance:
    try:
        return models.Distance.from_value(value)
    except (AttributeError, ValueError):
        allowed = ", ".join(member.value for member in models.Distance)
        raise InvalidValueError(
            f"Invalid distance '{value}'. Allowed values: {allowed}", reason="invalid_distance"
        )


def to_preview(post: models.Post) -> schemas.PostPreview:
    image = representative_image(post)
    return schemas.PostPreview(
        post_id=post.id,
        title=post.title,
        price=post.price,
        preview_image=image.image_url if image else None,
        location_name=post.location_name,
        post_type=post.type,
        post_status=post.status,
    )


# --- Operations ---

async def create_post(db: Session, writer_id: int, fields: schemas.PostCreate, images=None) -> models.Post:
    """Create a post and upload its images.

    The post row is only flushed, not committed, while the images upload to
    ``posts/<id>``. When an upload or image row fails, the transaction is rolled
    back and the storage folder is cleaned up, so no half-built post stays
    visible. If that cleanup fails too, orphaned files may remain in storage;
    this is logged but not retried.
    """
    logger.info("Creating post for user %s type=%s category=%s", writer_id, fields.type, fields.category)
    images = [image for image in (images or []) if image is not None]

    writer = _get_user_or_404(db, writer_id)
    post_type = parse_post_type(fields.type)
    category = parse_enum(models.Category, fields.category, "category")
    distance = _parse_distance(fields.distance)
    if len(images) > settings.MAX_IMAGES_PER_POST:
        raise InvalidValueError(
            f"You can upload up to {settings.MAX_IMAGES_PER_POST} images per post",
            reason="too_many_images",
        )

    now = datetime.now(timezone.utc)
    post = models.Post(
        writer=writer,
        type=post_type,
        category=category,
        title=fields.title,
        content=fields.content,
        price=fields.price,
        distance=distance,
        location_name=fields.location_name,
        location_latitude=fields.location_latitude,
        location_longitude=fields.location_longitude,
        status=models.PostStatus.ACTIVE,
        created_at=now,
        expiration_date=now + timedelta(days=settings.POST_EXPIRATION_DAYS),
    )
    crud.add_post(db, post)

    folder = media_uploader.post_folder(post.id)
    try:
        if images:
            image_urls = await media_uploader.upload_many(images, folder)
            crud.add_post_images(db, post, image_urls)
        db.commit()
    except Exception:
        db.rollback()
        if images:
            logger.warning("Rolling back post %s, removing uploads under %s", post.id, folder)
            media_uploader.delete_folder(folder)
        raise

    db.refresh(post)
    logger.info("Post %s created with %d image(s)", post.id, len(images))
    return post


def get_post_detail(db: Session, post_id: int, viewer_id: int) -> schemas.PostDetail:
    post = _get_post_or_404(db, post_id)
    writer = post.writer
    image_urls = [image.image_url for image in crud.get_post_images(db, post_id=post.id)]

    return schemas.PostDetail(
        is_owner=writer.id == viewer_id,
        writer_id=writer.id,
        writer_nickname=writer.nickname,
        writer_profile_image=writer.profile_image or "",
        category=post.category,
        distance=post.distance.value,
        title=post.title,
        created_at=post.created_at,
        content=post.content,
        price=post.price,
        location_name=post.location_name,
        location_latitude=post.location_latitude,
        location_longitude=post.location_longitude,
        post_type=post.type,
        post_status=post.status,
        image_urls=image_urls,
    )


def get_posts_by_user(db: Session, owner_id: int) -> List[schemas.UserPostPreview]:
    """Every post the user wrote, expired ones included, newest first."""
    logger.info("Fetching posts for user: %s", owner_id)

    results = []
    for post in newest_first(crud.get_posts_by_writer(db, writer_id=owner_id)):
        image = crud.get_preview_image(db, post_id=post.id)

        review_id: Optional[int] = None
        if post.status == models.PostStatus.COMPLETED:
            review = crud.get_review_by_post_and_reviewee(db, post_id=post.id, reviewee_id=owner_id)
            review_id = review.id if review else None

        results.append(schemas.UserPostPreview(
            post_id=post.id,
            title=post.title,
            price=post.price,
            preview_image=image.image_url if image else None,
            location_name=post.location_name,
            post_type=post.type,
            post_status=post.status,
            review_id=review_id,
        ))
    return results


def get_filtered_posts(
    db: Session,
    post_type: str,
    viewer_id: int,
    category: Optional[str] = None,
    radius: Optional[str] = None,
    keyword: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[schemas.PostPreview]:
    logger.info(
        "Filtering posts with type: %s, category: %s, radius: %s, keyword: %s, userId: %s",
        post_type, category, radius, keyword, viewer_id,
    )
    wanted_type = parse_post_type(post_type)
    wanted_category = parse_category(category)
    radius_km = parse_radius(radius)

    viewer = _get_user_or_404(db, viewer_id)
    posts = filter_posts(
        crud.get_all_posts(db),
        post_type=wanted_type,
        category=wanted_category,
        radius_km=radius_km,
        keyword=keyword,
        viewer_latitude=viewer.location_latitude,
        viewer_longitude=viewer.location_longitude,
        now=now,
    )
    return [to_preview(post) for post in posts]


def update_post_status(db: Session, post_id: int, actor_id: int, status: str) -> models.Post:
    post = _get_post_or_404(db, post_id)
    if post.writer_id != actor_id:
        raise ForbiddenError("Only the writer can change the post status")
    new_status = parse_enum(models.PostStatus, status, "status")
    if post.status == models.PostStatus.COMPLETED and new_status != post.status:
        raise InvalidValueError("Completed posts cannot change status", reason="invalid_status_transition")
    logger.info("Post %s status %s -> %s", post.id, post.status.value, new_status.value)
    return crud.update_post_status(db, post, new_status)


def update_my_location(db: Session, user_id: int, latitude: float, longitude: float) -> models.User:
    user = _get_user_or_404(db, user_id)
    return crud.update_user_location(db, user, latitude=latitude, longitude=longitude)
