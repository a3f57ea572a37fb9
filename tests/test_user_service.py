"""Tests for user service."""

import asyncio
import io
from uuid import uuid4

import pytest
from PIL import Image

from foodlens.domain.models import PRO, SubscriptionState
from foodlens.errors import NotFound, PayloadTooLarge, ValidationError
from foodlens.services.images import MEGABYTE
from tests.conftest import FakeUpload, make_image_bytes


def test_register_normalizes_email(container, user_repository) -> None:
    user = container.user_service.register("  Aigerim@Example.COM ", " Aigerim ")

    assert user.email == "aigerim@example.com"
    assert user.name == "Aigerim"
    assert user_repository.get_by_email("aigerim@example.com") == user


@pytest.mark.parametrize(("email", "name"), [("no-at-sign", "Dana"), ("a@b.kz", " ")])
def test_register_rejects_invalid_input(container, email, name) -> None:
    with pytest.raises(ValidationError):
        container.user_service.register(email, name)


def test_register_rejects_duplicate_email(container) -> None:
    container.user_service.register("dana@example.com", "Dana")

    with pytest.raises(ValidationError) as excinfo:
        container.user_service.register("DANA@example.com", "Dana")

    assert excinfo.value.details == {"field": "email"}


def test_get_user_raises_for_unknown_id(container) -> None:
    with pytest.raises(NotFound):
        container.user_service.get_user(uuid4())


def test_update_profile_applies_partial_changes(container, user, user_repository) -> None:
    updated = container.user_service.update_profile(
        user.id,
        {"name": "Dana", "goal": "gain_muscle", "allergies": ["milk", "nuts"]},
    )

    stored = user_repository.users[user.id]
    assert updated.name == "Dana"
    assert stored.profile.goal == "gain_muscle"
    assert stored.profile.allergies == ("milk", "nuts")
    assert stored.profile.daily_calories == 2000


def test_update_profile_rejects_unknown_fields(container, user, user_repository) -> None:
    with pytest.raises(ValidationError) as excinfo:
        container.user_service.update_profile(user.id, {"subscription_type": PRO})

    assert excinfo.value.details == {"field": "subscription_type"}
    assert user_repository.writes == []


def test_upload_avatar_stores_small_jpeg(container, user, user_repository) -> None:
    upload = FakeUpload(
        make_image_bytes(size=(1600, 1200), image_format="PNG"), "me.png", "image/png"
    )

    updated = asyncio.run(container.user_service.upload_avatar(user.id, upload))

    assert updated.avatar.content_type == "image/jpeg"
    assert user_repository.users[user.id].avatar == updated.avatar
    with Image.open(io.BytesIO(updated.avatar.data)) as image:
        assert image.size == (400, 300)


def test_free_avatar_above_size_ceiling_is_rejected(container, user) -> None:
    container.user_service.pipeline.free_limit_mb = 1
    upload = FakeUpload(b"\x00" * (MEGABYTE + 1))

    with pytest.raises(PayloadTooLarge):
        asyncio.run(container.user_service.upload_avatar(user.id, upload))


def test_pro_avatar_skips_free_ceiling(container, user_repository) -> None:
    user = user_repository.add(subscription=SubscriptionState(type=PRO))
    container.user_service.pipeline.free_limit_mb = 0

    updated = asyncio.run(
        container.user_service.upload_avatar(user.id, FakeUpload(make_image_bytes()))
    )

    assert updated.avatar is not None


def test_delete_account_removes_user_data(
    container, user_repository, food_repository, recipe_repository, water_repository
) -> None:
    user = user_repository.add()
    other = user_repository.add()
    for owner in (user, other):
        asyncio.run(container.food_service.analyze_description(owner.id, "apple"))
        asyncio.run(container.recipe_service.generate(owner.id, "Soup"))
        water_repository.save_amount(owner.id, "2026-10-18", 500)
    entry = container.food_service.history(user.id)[0]
    container.food_service.add_favorite(user.id, entry.id)

    container.user_service.delete_account(user.id)

    assert user.id not in user_repository.users
    assert container.food_service.history(other.id) != []
    assert [e.user_id for e in food_repository.entries.values()] == [other.id]
    assert food_repository.favorites == {}
    assert [r.owner for r in recipe_repository.recipes.values()] == [str(other.id)]
    assert water_repository.amounts == {(other.id, "2026-10-18"): 500}


def test_delete_unknown_account(container) -> None:
    with pytest.raises(NotFound):
        container.user_service.delete_account(uuid4())
