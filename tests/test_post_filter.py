from datetime import datetime, timedelta, timezone

import pytest

from biling import models
from biling.errors import InvalidValueError
from biling.helper.post_filter import (
    filter_posts,
    haversine_km,
    parse_category,
    parse_post_type,
    parse_radius,
    representative_image,
    within_radius,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
VIEWER = (37.51, 127.10)


def build_post(post_id, title="Folding bike", post_type=models.PostType.SHARE,
               category=models.Category.SPORTS, lat=37.50, lng=127.03,
               age=timedelta(days=1), expires=timedelta(days=30), images=()):
    post = models.Post(
        id=post_id,
        writer_id=1,
        type=post_type,
        category=category,
        title=title,
        price=0,
        location_latitude=lat,
        location_longitude=lng,
        status=models.PostStatus.ACTIVE,
        created_at=NOW - age,
        expiration_date=NOW + expires,
    )
    for url, sequence in images:
        post.images.append(models.PostImage(image_url=url, order_sequence=sequence))
    return post


def run_filter(posts, post_type=models.PostType.SHARE, category=None, radius_km=None, keyword=None):
    return filter_posts(
        posts,
        post_type=post_type,
        category=category,
        radius_km=radius_km,
        keyword=keyword,
        viewer_latitude=VIEWER[0],
        viewer_longitude=VIEWER[1],
        now=NOW,
    )


# --- Distance ---

def test_distance_to_same_point_is_zero():
    assert haversine_km(37.5, 127.03, 37.5, 127.03) == 0


def test_distance_is_symmetric():
    a = (37.50, 127.03)
    b = (35.18, 129.07)
    assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))


def test_distance_seoul_example():
    distance = haversine_km(VIEWER[0], VIEWER[1], 37.50, 127.03)
    assert 6.0 < distance < 6.6


def test_radius_boundary_is_inclusive():
    post = build_post(1)
    exact = haversine_km(VIEWER[0], VIEWER[1], post.location_latitude, post.location_longitude)
    assert within_radius(post, exact, *VIEWER)
    assert not within_radius(post, exact - 1e-9, *VIEWER)


def test_radius_ten_km_includes_and_five_km_excludes():
    post = build_post(1)
    assert run_filter([post], radius_km=10) == [post]
    assert run_filter([post], radius_km=5) == []


# --- Each predicate excludes on its own ---

def test_only_posts_passing_every_predicate_survive():
    keeper = build_post(1, title="Folding bike")
    wrong_type = build_post(2, post_type=models.PostType.BORROW)
    wrong_category = build_post(3, category=models.Category.KITCHEN)
    too_far = build_post(4, lat=35.18, lng=129.07)  # Busan
    wrong_keyword = build_post(5, title="Rice cooker")
    expired = build_post(6, expires=timedelta(days=-1))

    result = run_filter(
        [keeper, wrong_type, wrong_category, too_far, wrong_keyword, expired],
        category=models.Category.SPORTS,
        radius_km=10,
        keyword="BIKE",
    )

    assert result == [keeper]


def test_expired_post_is_hidden_even_when_everything_else_matches():
    expiring_now = build_post(1, expires=timedelta(0))
    assert run_filter([expiring_now]) == []


def test_keyword_matches_title_only():
    post = build_post(1, title="Tent")
    post.content = "great bike"
    assert run_filter([post], keyword="bike") == []
    assert run_filter([post], keyword="tE") == [post]


def test_no_optional_filters_keeps_everything_of_the_type():
    posts = [build_post(1, category=models.Category.BOOK), build_post(2, lat=35.18, lng=129.07)]
    assert {post.id for post in run_filter(posts)} == {1, 2}


def test_results_are_newest_first():
    older = build_post(1, age=timedelta(days=3))
    newer = build_post(2, age=timedelta(hours=1))
    same_time_higher_id = build_post(3, age=timedelta(hours=1))
    assert run_filter([older, newer, same_time_higher_id]) == [same_time_higher_id, newer, older]


def test_naive_expiration_dates_are_read_as_utc():
    post = build_post(1)
    post.expiration_date = (NOW + timedelta(minutes=5)).replace(tzinfo=None)
    post.created_at = NOW.replace(tzinfo=None)
    assert run_filter([post]) == [post]


def test_radius_without_viewer_location_is_rejected():
    with pytest.raises(InvalidValueError) as exc_info:
        filter_posts([build_post(1)], post_type=models.PostType.SHARE, radius_km=3,
                     viewer_latitude=None, viewer_longitude=None, now=NOW)
    assert exc_info.value.reason == "location_required"


# --- Parsing ---

@pytest.mark.parametrize("value, expected", [
    ("5km", 5.0),
    ("10KM", 10.0),
    (" 2.5 km ", 2.5),
    ("3", 3.0),
])
def test_parse_radius(value, expected):
    assert parse_radius(value) == expected


@pytest.mark.parametrize("value", [None, "unlimited", "UNLIMITED"])
def test_parse_radius_unlimited(value):
    assert parse_radius(value) is None


@pytest.mark.parametrize("value", ["far", "km", "-5km", "5 miles", ""])
def test_parse_radius_rejects_malformed_values(value):
    with pytest.raises(InvalidValueError) as exc_info:
        parse_radius(value)
    assert exc_info.value.reason == "invalid_radius"


def test_parse_post_type_is_case_insensitive():
    assert parse_post_type("share") is models.PostType.SHARE
    assert parse_post_type("Borrow") is models.PostType.BORROW


def test_parse_post_type_rejects_unknown_value():
    with pytest.raises(InvalidValueError) as exc_info:
        parse_post_type("SELL")
    assert exc_info.value.reason == "invalid_type"
    assert "SHARE" in exc_info.value.message


@pytest.mark.parametrize("value", [None, "ALL", "all"])
def test_parse_category_all_means_no_filter(value):
    assert parse_category(value) is None


def test_parse_category_rejects_unknown_value():
    with pytest.raises(InvalidValueError):
        parse_category("CARS")


def test_all_category_returns_every_category():
    posts = [build_post(1, category=models.Category.BOOK), build_post(2, category=models.Category.BABY)]
    assert len(run_filter(posts, category=parse_category("all"))) == 2


# --- Representative image ---

def test_representative_image_is_lowest_sequence():
    post = build_post(1, images=[("b.jpg", 2), ("a.jpg", 1), ("c.jpg", 3)])
    assert representative_image(post).image_url == "a.jpg"


def test_representative_image_absent_without_images():
    assert representative_image(build_post(1)) is None
