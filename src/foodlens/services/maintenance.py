"""Startup reconciliation of stale subscription and streak state."""

import logging
from dataclasses import dataclass

from foodlens.domain.models import FREE, SubscriptionState
from foodlens.services.clock import AppClock
from foodlens.services.streaks import expire_streak
from foodlens.services.subscriptions import effective_subscription
from foodlens.services.users import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationReport:
    """Counts of records changed by one reconciliation pass."""

    users_checked: int
    streaks_reset: int
    subscriptions_downgraded: int

    def as_dict(self) -> dict[str, int]:
        """Return the report for API responses."""
        return {
            "usersChecked": self.users_checked,
            "streaksReset": self.streaks_reset,
            "subscriptionsDowngraded": self.subscriptions_downgraded,
        }


@dataclass
class ReconciliationService:
    """Zeroes broken streaks and downgrades expired pro subscriptions."""

    repository: UserRepository
    clock: AppClock

    def run(self) -> ReconciliationReport:
        """Reconcile every user. Running twice changes nothing the second time."""
        now = self.clock.now()
        users = self.repository.list_users()
        streaks_reset = 0
        downgraded = 0
        for user in users:
            expired = expire_streak(user.streak, now, self.clock)
            if expired is not None:
                self.repository.save_streak(user.id, expired)
                streaks_reset += 1
            _, needs_persist = effective_subscription(user.subscription, now)
            if needs_persist:
                self.repository.save_subscription(user.id, SubscriptionState(type=FREE))
                downgraded += 1
        report = ReconciliationReport(
            users_checked=len(users),
            streaks_reset=streaks_reset,
            subscriptions_downgraded=downgraded,
        )
        logger.info(
            "Reconciliation finished",
            extra={
                "users_checked": report.users_checked,
                "streaks_reset": report.streaks_reset,
                "subscriptions_downgraded": report.subscriptions_downgraded,
            },
        )
        return report
