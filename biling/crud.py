# biling/crud.py

from typing import Optional, List

from sqlalchemy.orm import Session, selectinload

from . import models


# --- User CRUD ---

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def update_user_location(db: Session, user: models.User, latitude: float, longitude: float):
    user.location_latitude = latitude
    user.location_longitude = longitude
    db.commit()
    db.refresh(user)
    return user


# --- Post CRUD ---

def get_post(db: Session, post_id: int) -> Optional[models.Post]:
    return db.query(models.Post).filter(models.Post.id == post_id).first()


def get_posts_by_writer(db: Session, writer_id: int) -> List[models.Post]:
    return (
        db.query(models.Post)
        .options(selectinload(models.Post.images))
        .filter(models.Post.writer_id == writer_id)
        .all()
    )


def get_all_posts(db: Session) -> List[models.Post]:
    return db.query(models.Post).options(selectinload(models.Post.images)).all()


def add_post(db: Session, post: models.Post) -> models.Post:
    """Stage a new post and flush so it gets an id; the caller commits."""
    db.add(post)
    db.flush()
    return post


def update_post_status(db: Session, post: models.Post, status: models.PostStatus):
    post.status = status
    db.commit()
    db.refresh(post)
    return post


# --- Post image CRUD ---

def add_post_images(db: Session, post: models.Post, image_urls: List[str]) -> List[models.PostImage]:
    images = [
        models.PostImage(post=post, image_url=url, order_sequence=sequence)
        for sequence, url in enumerate(image_urls, start=1)
    ]
    db.add_all(images)
    db.flush()
    return images


def get_post_images(db: Session, post_id: int) -> List[models.PostImage]:
    return (
        db.query(models.PostImage)
        .filter(models.PostImage.post_id == post_id)
        .order_by(models.PostImage.order_sequence.asc())
        .all()
    )


def get_preview_image(db: Session, post_id: int) -> Optional[models.PostImage]:
    return (
        db.query(models.PostImage)
        .filter(models.PostImage.post_id == post_id)
        .order_by(models.PostImage.order_sequence.asc())
        .first()
    )


# --- Review CRUD ---

def get_review_by_post_and_reviewee(db: Session, post_id: int, reviewee_id: int) -> Optional[models.Review]:
    return db.query(models.Review).filter(
        models.Review.post_id == post_id,
        models.Review.reviewee_id == reviewee_id
    ).first()
