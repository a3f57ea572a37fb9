"""Subscription tiers, expiry and grants."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from foodlens.domain.models import FREE, PRO, SUBSCRIPTION_TYPES, SubscriptionState, UserRecord
from foodlens.errors import NotFound, ValidationError
from foodlens.services.clock import AppClock

if TYPE_CHECKING:
    from foodlens.services.users import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectiveSubscription:
    """The tier that applies right now."""

    type: str
    expires_at: datetime | None

    @property
    def is_pro(self) -> bool:
        """Return True for the pro tier."""
        return self.type == PRO


def effective_subscription(
    stored: SubscriptionState, now: datetime
) -> tuple[EffectiveSubscription, bool]:
    """Return the effective tier and whether a downgrade must be persisted."""
    if stored.type != PRO:
        return EffectiveSubscription(type=FREE, expires_at=None), False
    if stored.expires_at is not None and now > stored.expires_at:
        return EffectiveSubscription(type=FREE, expires_at=None), True
    return EffectiveSubscription(type=PRO, expires_at=stored.expires_at), False


def remaining_days(expires_at: datetime | None, today: date, clock: AppClock) -> int:
    """Return whole local days left before expiry, never negative."""
    if expires_at is None:
        return 0
    return max(0, (clock.local_day(expires_at) - today).days)


@dataclass
class SubscriptionService:
    """Resolves and changes subscription tiers."""

    repository: "UserRepository"
    clock: AppClock

    def resolve(self, user: UserRecord) -> EffectiveSubscription:
        """Return the effective tier, persisting a detected expiry."""
        effective, needs_persist = effective_subscription(
            user.subscription, self.clock.now()
        )
        if needs_persist:
            logger.info(
                "Pro subscription expired, downgrading to free",
                extra={"user_id": str(user.id)},
            )
            self.repository.save_subscription(user.id, SubscriptionState(type=FREE))
        return effective

    def grant(
        self, user_id: UUID, subscription_type: str, duration_days: int | None = None
    ) -> UserRecord:
        """Set a user's tier, with day-granular expiry for timed pro grants."""
        if subscription_type not in SUBSCRIPTION_TYPES:
            raise ValidationError(
                'Subscription type must be "free" or "pro"', field="type"
            )
        if duration_days is not None and (
            isinstance(duration_days, bool)
            or not isinstance(duration_days, int)
            or duration_days < 1
        ):
            raise ValidationError(
                "duration_days must be a positive integer", field="duration_days"
            )
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)

        expires_at = None
        if subscription_type == PRO and duration_days:
            local_expiry = self.clock.start_of_today() + timedelta(days=duration_days)
            expires_at = local_expiry.astimezone(UTC)
        state = SubscriptionState(type=subscription_type, expires_at=expires_at)
        self.repository.save_subscription(user_id, state)
        logger.info(
            "Subscription granted",
            extra={
                "user_id": str(user_id),
                "type": subscription_type,
                "duration_days": duration_days,
            },
        )
        return replace(user, subscription=state)
