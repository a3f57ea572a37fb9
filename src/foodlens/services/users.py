"""User-related business logic."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol
from uuid import UUID

from foodlens.domain.images import AVATAR_PROFILE, StoredImage
from foodlens.domain.models import (
    StreakState,
    SubscriptionState,
    UserProfile,
    UserRecord,
)
from foodlens.domain.usage import UsageBucket
from foodlens.errors import NotFound, ValidationError
from foodlens.services.images import ImagePipeline, UploadedFile
from foodlens.services.subscriptions import SubscriptionService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset(UserProfile.__dataclass_fields__)


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return the user registered with an email, if present."""

    def create_user(self, email: str, name: str) -> UserRecord:
        """Create and return a new user record."""

    def list_users(self) -> list[UserRecord]:
        """Return all users."""

    def update_profile(self, user_id: UUID, name: str, profile: UserProfile) -> None:
        """Replace the user's name and profile attributes."""

    def save_subscription(self, user_id: UUID, subscription: SubscriptionState) -> None:
        """Persist the stored subscription tier."""

    def save_usage(self, user_id: UUID, usage: UsageBucket) -> None:
        """Overwrite the user's daily usage bucket."""

    def save_streak(self, user_id: UUID, streak: StreakState) -> None:
        """Persist streak counters and the last visit timestamp."""

    def save_avatar(self, user_id: UUID, avatar: StoredImage) -> None:
        """Persist the compressed avatar image."""

    def delete_user(self, user_id: UUID) -> None:
        """Delete the user record."""


class UserDataStore(Protocol):
    """A repository holding records that belong to a user."""

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete everything stored for a user."""


def require_user(repository: UserRepository, user_id: UUID) -> UserRecord:
    """Return a user or raise NotFound."""
    user = repository.get_user(user_id)
    if user is None:
        raise NotFound("User", user_id)
    return user


@dataclass
class UserService:
    """Application service for account and profile actions."""

    repository: UserRepository
    subscriptions: SubscriptionService
    pipeline: ImagePipeline
    user_data: list[UserDataStore] = field(default_factory=list)

    def register(self, email: str, name: str) -> UserRecord:
        """Create an account for a new email address."""
        normalized = email.strip().lower()
        if "@" not in normalized:
            raise ValidationError("A valid email is required", field="email")
        if not name.strip():
            raise ValidationError("Name is required", field="name")
        if self.repository.get_by_email(normalized):
            raise ValidationError("Email is already registered", field="email")
        user = self.repository.create_user(normalized, name.strip())
        logger.info("Registered user", extra={"user_id": str(user.id)})
        return user

    def get_user(self, user_id: UUID) -> UserRecord:
        """Return a user or raise NotFound."""
        return require_user(self.repository, user_id)

    def update_profile(self, user_id: UUID, changes: dict[str, object]) -> UserRecord:
        """Apply a partial profile update."""
        user = require_user(self.repository, user_id)
        name = user.name
        if "name" in changes:
            name = str(changes.pop("name") or "").strip()
            if not name:
                raise ValidationError("Name is required", field="name")
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown profile fields: {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        if "allergies" in changes:
            changes["allergies"] = tuple(changes["allergies"] or ())
        profile = replace(user.profile, **changes)
        self.repository.update_profile(user_id, name, profile)
        return replace(user, name=name, profile=profile)

    async def upload_avatar(self, user_id: UUID, upload: UploadedFile) -> UserRecord:
        """Compress and store a new avatar image."""
        user = require_user(self.repository, user_id)
        effective = self.subscriptions.resolve(user)
        avatar = await self.pipeline.from_upload(
            upload, is_pro=effective.is_pro, profile=AVATAR_PROFILE
        )
        self.repository.save_avatar(user_id, avatar)
        return replace(user, avatar=avatar)

    def delete_account(self, user_id: UUID) -> None:
        """Delete a user together with their diary, recipes and water log."""
        require_user(self.repository, user_id)
        for store in self.user_data:
            store.delete_user_data(user_id)
        self.repository.delete_user(user_id)
        logger.info("Deleted account", extra={"user_id": str(user_id)})
