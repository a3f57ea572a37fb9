"""Per-user daily usage counters."""

from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from foodlens.domain.models import UserRecord
from foodlens.domain.usage import USAGE_KINDS, UsageBucket
from foodlens.errors import NotFound, ValidationError
from foodlens.services.clock import AppClock

if TYPE_CHECKING:
    from foodlens.services.users import UserRepository


def ensure_usage_kind(kind: str) -> str:
    """Reject usage kinds outside the limits table."""
    if kind not in USAGE_KINDS:
        raise ValidationError(f"Unknown usage kind: {kind}", field="kind")
    return kind


def current_usage(bucket: UsageBucket | None, today_key: str) -> UsageBucket:
    """Return the stored bucket when it belongs to today, else a zeroed one."""
    if bucket is not None and bucket.date == today_key:
        return bucket
    return UsageBucket(date=today_key)


@dataclass
class UsageService:
    """Reads and increments the single rolling usage bucket."""

    repository: "UserRepository"
    clock: AppClock

    def current(self, user: UserRecord) -> UsageBucket:
        """Return today's usage for a loaded user."""
        return current_usage(user.usage, self.clock.date_key())

    def increment(self, user_id: UUID, kind: str) -> UsageBucket:
        """Count one more action of a kind for today and persist it."""
        ensure_usage_kind(kind)
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        bucket = self.current(user).incremented(kind)
        self.repository.save_usage(user_id, bucket)
        return bucket
