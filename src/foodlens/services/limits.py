"""Limit enforcement for metered actions."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from foodlens.domain.models import PRO
from foodlens.domain.usage import LIMITS, USAGE_KINDS
from foodlens.errors import LimitReached, NotFound, RequiresPro
from foodlens.services.subscriptions import (
    EffectiveSubscription,
    SubscriptionService,
    remaining_days,
)
from foodlens.services.usage import UsageService, ensure_usage_kind

if TYPE_CHECKING:
    from foodlens.services.users import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LimitContext:
    """Outcome of a passed limit check, handed to the guarded action."""

    subscription_type: str
    is_pro: bool
    kind: str
    current: int
    max: int

    def as_dict(self) -> dict[str, object]:
        """Return the context in the API's camelCase shape."""
        return {
            "subscriptionType": self.subscription_type,
            "isPro": self.is_pro,
            self.kind: {"current": self.current, "max": self.max},
        }


@dataclass
class LimitGate:
    """Allows or denies metered actions before they run."""

    repository: "UserRepository"
    subscriptions: SubscriptionService
    usage: UsageService
    _locks: dict[tuple[UUID, str], asyncio.Lock] = field(
        default_factory=dict, init=False, repr=False
    )
    _lock_holders: dict[tuple[UUID, str], int] = field(
        default_factory=dict, init=False, repr=False
    )

    def check(self, user_id: UUID, kind: str) -> LimitContext:
        """Raise LimitReached when today's usage is at the tier ceiling."""
        ensure_usage_kind(kind)
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        effective = self.subscriptions.resolve(user)
        limit = LIMITS[effective.type][kind]
        current = self.usage.current(user).count(kind)
        if current >= limit:
            logger.info(
                "Usage limit reached",
                extra={"user_id": str(user_id), "kind": kind, "max": limit},
            )
            raise LimitReached(kind, current, limit, effective.is_pro)
        return LimitContext(
            subscription_type=effective.type,
            is_pro=effective.is_pro,
            kind=kind,
            current=current,
            max=limit,
        )

    def require_pro(self, user_id: UUID) -> EffectiveSubscription:
        """Raise RequiresPro unless the effective tier is pro."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        had_pro = user.subscription.type == PRO
        effective = self.subscriptions.resolve(user)
        if not effective.is_pro:
            if had_pro:
                raise RequiresPro(
                    "This feature is available to Pro users only. "
                    "Your subscription has expired."
                )
            raise RequiresPro()
        return effective

    def overview(self, user_id: UUID) -> dict[str, object]:
        """Return the subscription and per-kind usage against limits."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        effective = self.subscriptions.resolve(user)
        bucket = self.usage.current(user)
        limits = LIMITS[effective.type]
        clock = self.subscriptions.clock
        usage: dict[str, object] = {"date": bucket.date}
        for kind in USAGE_KINDS:
            current = bucket.count(kind)
            usage[kind] = {
                "current": current,
                "max": limits[kind],
                "remaining": max(0, limits[kind] - current),
            }
        return {
            "subscription": {
                "type": effective.type,
                "isPro": effective.is_pro,
                "expiresAt": effective.expires_at.isoformat()
                if effective.expires_at
                else None,
                "remainingDays": remaining_days(
                    effective.expires_at, clock.today(), clock
                ),
            },
            "usage": usage,
        }

    @asynccontextmanager
    async def metered(self, user_id: UUID, kind: str) -> AsyncIterator[LimitContext]:
        """Run a block under the limit gate and count it once it succeeds.

        Check, action and increment for one (user, kind) pair are serialized
        within this process.
        """
        key = (user_id, kind)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_holders[key] = self._lock_holders.get(key, 0) + 1
        try:
            async with lock:
                context = self.check(user_id, kind)
                yield context
                self.usage.increment(user_id, kind)
        finally:
            # the entry goes once nobody holds or waits for it
            self._lock_holders[key] -= 1
            if not self._lock_holders[key]:
                del self._lock_holders[key]
                del self._locks[key]
