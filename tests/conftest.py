import io
import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Settings are read at import time, so the environment has to be ready first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "test-cloud")
os.environ.setdefault("CLOUDINARY_API_KEY", "test-key")
os.environ.setdefault("CLOUDINARY_API_SECRET", "test-api-secret")

# Add the project root to the sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from biling.main import app
from biling.database import Base, get_db
from biling.dependencies import get_current_user_id
from biling import models


# --- Test Database Setup ---
# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool for in-memory SQLite to persist connections
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Viewer location used throughout the tests (Seoul, near Gangnam)
VIEWER_LAT = 37.51
VIEWER_LNG = 127.10


@pytest.fixture(name="db_session")
def override_get_db():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="make_user")
def make_user_factory(db_session: Session):
    def make_user(nickname="neighbor", profile_image=None, lat=VIEWER_LAT, lng=VIEWER_LNG):
        user = models.User(
            nickname=nickname,
            profile_image=profile_image,
            location_latitude=lat,
            location_longitude=lng,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return make_user


@pytest.fixture(name="test_user")
def create_test_user(make_user):
    return make_user(nickname="viewer")


@pytest.fixture(name="make_post")
def make_post_factory(db_session: Session):
    def make_post(
        writer,
        title="Camping tent",
        post_type=models.PostType.SHARE,
        category=models.Category.SPORTS,
        lat=37.50,
        lng=127.03,
        created_at=None,
        expires_in=timedelta(days=180),
        status=models.PostStatus.ACTIVE,
        image_urls=(),
        price=1000,
    ):
        created_at = created_at or datetime.now(timezone.utc)
        post = models.Post(
            writer=writer,
            type=post_type,
            category=category,
            title=title,
            content=f"{title} for the weekend",
            price=price,
            distance=models.Distance.KM_5,
            location_name="Seocho-dong",
            location_latitude=lat,
            location_longitude=lng,
            status=status,
            created_at=created_at,
            expiration_date=datetime.now(timezone.utc) + expires_in,
        )
        for sequence, url in enumerate(image_urls, start=1):
            post.images.append(models.PostImage(image_url=url, order_sequence=sequence))
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post
    return make_post


# This fixture overrides the bearer-token dependency
# to always resolve to our test_user for authenticated requests.
@pytest.fixture(name="authenticated_client")
def get_authenticated_client(db_session: Session, test_user: models.User):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_current_user_id] = lambda: test_user.id
    with TestClient(app) as client:
        yield client
    app.dependency_overrides = {}


@pytest.fixture(name="client")
def get_unauthenticated_client(db_session: Session):
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides = {}


@pytest.fixture(name="png_bytes")
def png_bytes_factory():
    def png_bytes(color=(200, 30, 30), size=(32, 32)) -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", size, color).save(buffer, format="PNG")
        return buffer.getvalue()
    return png_bytes
