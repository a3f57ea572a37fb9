"""Tests for the food diary service."""

import asyncio
import base64
import io
from datetime import date, datetime, timedelta

import pytest
from PIL import Image

from foodlens.domain.food import (
    BREAKFAST,
    DINNER,
    LUNCH,
    SNACK,
    FoodEntryDraft,
    meal_type_for_hour,
)
from foodlens.domain.models import PRO, SubscriptionState, UserProfile
from foodlens.domain.usage import UsageBucket
from foodlens.errors import (
    LimitReached,
    NotFound,
    PayloadTooLarge,
    UpstreamUnavailable,
    ValidationError,
)
from foodlens.services.images import MEGABYTE
from tests.conftest import NOW, TIMEZONE, FakeUpload, make_image_bytes


@pytest.mark.parametrize(
    ("hour", "meal_type"),
    [
        (5, SNACK),
        (6, BREAKFAST),
        (11, BREAKFAST),
        (12, LUNCH),
        (15, LUNCH),
        (16, DINNER),
        (20, DINNER),
        (21, SNACK),
        (0, SNACK),
    ],
)
def test_meal_type_for_hour(hour, meal_type) -> None:
    assert meal_type_for_hour(hour) == meal_type


def test_analyze_upload_logs_entry_and_counts(container, user, user_repository) -> None:
    upload = FakeUpload(make_image_bytes(size=(2000, 1000)))

    result = asyncio.run(container.food_service.analyze_upload(user.id, upload))

    stored = user_repository.users[user.id]
    assert result.entry.name == "Plov with beef"
    assert result.entry.meal_type == LUNCH
    assert result.entry.image is not None
    assert result.analysis.health_score == 55
    assert stored.usage == UsageBucket(date="2026-10-18", photos_count=1)
    assert stored.streak.current == 1


def test_analyze_upload_stores_food_sized_image(container, user, ai_client) -> None:
    upload = FakeUpload(make_image_bytes(size=(2400, 1200)))

    result = asyncio.run(container.food_service.analyze_upload(user.id, upload))

    with Image.open(io.BytesIO(result.entry.image.data)) as image:
        assert max(image.size) == 800
    sent = ai_client.json_calls[0]["image_data_url"]
    with Image.open(io.BytesIO(base64.b64decode(sent.split(",", 1)[1]))) as image:
        assert max(image.size) == 1920


def test_third_free_photo_is_rejected_without_side_effects(
    container, user_repository, food_repository, ai_client
) -> None:
    user = user_repository.add(usage=UsageBucket(date="2026-10-18", photos_count=2))
    payload = base64.b64encode(make_image_bytes()).decode()

    with pytest.raises(LimitReached):
        asyncio.run(container.food_service.analyze_inline(user.id, payload))

    assert ai_client.json_calls == []
    assert food_repository.entries == {}
    assert user_repository.users[user.id].usage.photos_count == 2


def test_failed_analysis_does_not_consume_quota(
    container, user, user_repository, ai_client
) -> None:
    ai_client.error = UpstreamUnavailable()
    payload = base64.b64encode(make_image_bytes()).decode()

    with pytest.raises(UpstreamUnavailable):
        asyncio.run(container.food_service.analyze_inline(user.id, payload))

    stored = user_repository.users[user.id]
    assert stored.usage.photos_count == 0
    assert stored.streak.current == 0


def test_oversized_free_upload_is_rejected(
    container, user, user_repository
) -> None:
    container.food_service.pipeline.free_limit_mb = 1
    upload = FakeUpload(b"\x00" * (2 * MEGABYTE))

    with pytest.raises(PayloadTooLarge) as excinfo:
        asyncio.run(container.food_service.analyze_upload(user.id, upload))

    assert excinfo.value.details == {"limit": "1MB", "fileSize": "2.00MB"}
    assert user_repository.users[user.id].usage.photos_count == 0


def test_analyze_description_is_not_metered(container, user, user_repository) -> None:
    result = asyncio.run(
        container.food_service.analyze_description(user.id, "two apples")
    )

    stored = user_repository.users[user.id]
    assert result.entry.image is None
    assert stored.usage.photos_count == 0
    assert stored.streak.current == 1


def test_analyze_description_requires_text(container, user) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(container.food_service.analyze_description(user.id, "   "))


def _log(container, user_id, logged_at: datetime, calories: float = 100.0):
    return container.food_service.repository.create_entry(
        user_id,
        FoodEntryDraft(
            name="Apple",
            calories=calories,
            protein_g=1,
            fat_g=0.5,
            carbs_g=20,
            health_score=90,
            meal_type=SNACK,
            logged_at=logged_at,
        ),
    )


def test_entries_for_day_uses_local_day_bounds(container, user) -> None:
    _log(container, user.id, datetime(2026, 10, 17, 23, 59, tzinfo=TIMEZONE))
    today = _log(container, user.id, datetime(2026, 10, 18, 0, 1, tzinfo=TIMEZONE))
    _log(container, user.id, datetime(2026, 10, 19, 0, 0, tzinfo=TIMEZONE))

    entries = container.food_service.entries_for_day(user.id)

    assert entries == [today]


def test_daily_summary_totals_and_water(container, user, water_repository) -> None:
    _log(container, user.id, NOW - timedelta(hours=2), calories=300)
    _log(container, user.id, NOW - timedelta(hours=1), calories=200)
    _log(container, user.id, NOW - timedelta(days=1), calories=999)
    water_repository.save_amount(user.id, "2026-10-18", 750)

    summary = container.food_service.daily_summary(user.id)

    assert summary.day == date(2026, 10, 18)
    assert summary.calories == 500
    assert summary.carbs_g == 40
    assert summary.target_calories == 2000
    assert summary.water_ml == 750
    assert [entry.calories for entry in summary.entries] == [200, 300]


def test_history_is_newest_first(container, user) -> None:
    older = _log(container, user.id, NOW - timedelta(days=3))
    newer = _log(container, user.id, NOW)

    assert container.food_service.history(user.id) == [newer, older]


def test_update_entry_validates_and_applies(container, user) -> None:
    entry = _log(container, user.id, NOW)

    updated = asyncio.run(
        container.food_service.update_entry(
            user.id, entry.id, {"name": "Green apple", "meal_type": BREAKFAST}
        )
    )

    assert updated.name == "Green apple"
    assert updated.meal_type == BREAKFAST
    assert updated.calories == entry.calories


@pytest.mark.parametrize(
    "changes",
    [{"meal_type": "brunch"}, {"calories": -1}, {"user_id": "x"}, {"name": " "}, {}],
)
def test_update_entry_rejects_bad_changes(container, user, changes) -> None:
    entry = _log(container, user.id, NOW)

    with pytest.raises(ValidationError):
        asyncio.run(container.food_service.update_entry(user.id, entry.id, changes))


def test_update_entry_replaces_image(container, user_repository) -> None:
    user = user_repository.add(subscription=SubscriptionState(type=PRO))
    entry = _log(container, user.id, NOW)
    payload = base64.b64encode(make_image_bytes(size=(1000, 500))).decode()

    updated = asyncio.run(
        container.food_service.update_entry(user.id, entry.id, {}, image=payload)
    )

    assert updated.image is not None
    assert updated.image.content_type == "image/jpeg"


def test_other_users_entries_are_not_found(container, user, user_repository) -> None:
    other = user_repository.add()
    entry = _log(container, other.id, NOW)

    with pytest.raises(NotFound):
        container.food_service.delete_entry(user.id, entry.id)
    with pytest.raises(NotFound):
        asyncio.run(
            container.food_service.update_entry(user.id, entry.id, {"name": "Mine"})
        )

    container.food_service.delete_entry(other.id, entry.id)
    assert container.food_service.history(other.id) == []


def test_preview_description_does_not_log(container, user, user_repository) -> None:
    analysis = asyncio.run(
        container.food_service.preview_description(user.id, "bowl of plov")
    )

    assert analysis.name == "Plov with beef"
    assert container.food_service.history(user.id) == []
    assert user_repository.writes == []


def test_preview_description_requires_text(container, user) -> None:
    with pytest.raises(ValidationError):
        asyncio.run(container.food_service.preview_description(user.id, ""))


def test_weekly_progress_covers_last_seven_local_days(container, user) -> None:
    _log(container, user.id, datetime(2026, 10, 12, 0, 5, tzinfo=TIMEZONE), 400)
    _log(container, user.id, datetime(2026, 10, 11, 23, 55, tzinfo=TIMEZONE), 999)
    _log(container, user.id, NOW - timedelta(hours=3), calories=1000)
    _log(container, user.id, NOW - timedelta(hours=1), calories=500)

    progress = container.food_service.weekly_progress(user.id)

    assert [day.day for day in progress] == [
        date(2026, 10, 12) + timedelta(days=offset) for offset in range(7)
    ]
    assert (progress[0].calories, progress[0].entry_count) == (400, 1)
    assert progress[0].percentage == 20
    assert (progress[-1].calories, progress[-1].entry_count) == (1500, 2)
    assert progress[-1].percentage == 75
    assert progress[3].percentage == 0


def test_weekly_progress_without_target_is_zero(container, user_repository) -> None:
    user = user_repository.add(profile=UserProfile(daily_calories=0))
    _log(container, user.id, NOW, calories=500)

    progress = container.food_service.weekly_progress(user.id)

    assert progress[-1].percentage == 0


def test_monthly_active_days_uses_local_days(container, user) -> None:
    _log(container, user.id, datetime(2026, 9, 30, 23, 30, tzinfo=TIMEZONE))
    _log(container, user.id, datetime(2026, 10, 1, 0, 10, tzinfo=TIMEZONE))
    _log(container, user.id, datetime(2026, 10, 18, 9, 0, tzinfo=TIMEZONE))
    _log(container, user.id, datetime(2026, 10, 18, 12, 0, tzinfo=TIMEZONE))
    _log(container, user.id, datetime(2026, 11, 1, 0, 0, tzinfo=TIMEZONE))

    days = container.food_service.monthly_active_days(user.id, 2026, 10)

    assert days == [date(2026, 10, 1), date(2026, 10, 18)]


def test_monthly_active_days_handles_december(container, user) -> None:
    _log(container, user.id, datetime(2026, 12, 31, 23, 0, tzinfo=TIMEZONE))

    assert container.food_service.monthly_active_days(user.id, 2026, 12) == [
        date(2026, 12, 31)
    ]


@pytest.mark.parametrize(("year", "month"), [(2026, 0), (2026, 13), (0, 5)])
def test_monthly_active_days_rejects_bad_month(container, user, year, month) -> None:
    with pytest.raises(ValidationError):
        container.food_service.monthly_active_days(user.id, year, month)


def test_favorite_round_trip_through_diary(container, user, user_repository) -> None:
    entry = _log(container, user.id, NOW - timedelta(days=2), calories=250)
    service = container.food_service

    favorite = service.add_favorite(user.id, entry.id)
    logged = service.log_favorite(user.id, favorite.id)

    assert [item.id for item in service.favorites(user.id)] == [favorite.id]
    assert favorite.name == "Apple"
    assert (favorite.calories, favorite.health_score) == (250, 90)
    assert logged.id != entry.id
    assert logged.calories == 250
    assert logged.logged_at == NOW
    assert logged.meal_type == LUNCH
    assert logged.image is None
    assert user_repository.users[user.id].streak.current == 0


def test_favorites_belong_to_their_owner(container, user, user_repository) -> None:
    other = user_repository.add()
    entry = _log(container, other.id, NOW)
    favorite = container.food_service.add_favorite(other.id, entry.id)

    with pytest.raises(NotFound):
        container.food_service.add_favorite(user.id, entry.id)
    with pytest.raises(NotFound):
        container.food_service.log_favorite(user.id, favorite.id)
    with pytest.raises(NotFound):
        container.food_service.remove_favorite(user.id, favorite.id)
    assert container.food_service.favorites(user.id) == []


def test_remove_favorite(container, user) -> None:
    entry = _log(container, user.id, NOW)
    favorite = container.food_service.add_favorite(user.id, entry.id)

    container.food_service.remove_favorite(user.id, favorite.id)

    assert container.food_service.favorites(user.id) == []
    assert container.food_service.history(user.id) == [entry]
