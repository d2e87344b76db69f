# biling/models.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    Float,
    ForeignKey,
    Enum,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from biling.database import Base
import enum


class PostType(str, enum.Enum):
    SHARE = "SHARE"
    BORROW = "BORROW"


class Category(str, enum.Enum):
    DIGITAL = "DIGITAL"
    APPLIANCE = "APPLIANCE"
    FURNITURE = "FURNITURE"
    KITCHEN = "KITCHEN"
    CLOTHING = "CLOTHING"
    BOOK = "BOOK"
    SPORTS = "SPORTS"
    HOBBY = "HOBBY"
    BABY = "BABY"
    ETC = "ETC"


class PostStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RESERVED = "RESERVED"
    COMPLETED = "COMPLETED"  # terminal: the item changed hands


class Distance(str, enum.Enum):
    """Trade radius the writer is willing to travel, as shown on the post."""

    KM_3 = "3km"
    KM_5 = "5km"
    KM_10 = "10km"
    ANY = "unlimited"

    @classmethod
    def from_value(cls, value: str) -> "Distance":
        normalized = value.strip().lower().replace(" ", "")
        for member in cls:
            if member.value == normalized or member.name.lower() == normalized:
                return member
        raise ValueError(f"Unknown distance: {value}")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    nickname = Column(String(50), nullable=False)
    profile_image = Column(String, nullable=True)
    location_latitude = Column(Float, nullable=True)
    location_longitude = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    posts = relationship("Post", back_populates="writer")


class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    writer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(PostType), nullable=False, index=True)
    category = Column(Enum(Category), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=True)
    price = Column(Integer, nullable=False, default=0)
    distance = Column(Enum(Distance), nullable=False, default=Distance.ANY)
    location_name = Column(String, nullable=True)
    location_latitude = Column(Float, nullable=False)
    location_longitude = Column(Float, nullable=False)
    status = Column(Enum(PostStatus), nullable=False, default=PostStatus.ACTIVE)

    created_at = Column(DateTime(timezone=True), nullable=False)
    # Always created_at + POST_EXPIRATION_DAYS
    expiration_date = Column(DateTime(timezone=True), nullable=False)

    writer = relationship("User", back_populates="posts")
    images = relationship(
        "PostImage",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="PostImage.order_sequence",
    )

    __table_args__ = (
        Index('idx_posts_location', 'location_latitude', 'location_longitude'),
    )


class PostImage(Base):
    __tablename__ = "post_images"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String, nullable=False)
    order_sequence = Column(Integer, nullable=False)  # 1-based

    post = relationship("Post", back_populates="images")


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    reviewee_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=True)
    content = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    post = relationship("Post")
    reviewer = relationship("User", foreign_keys=[reviewer_id])
    reviewee = relationship("User", foreign_keys=[reviewee_id])
