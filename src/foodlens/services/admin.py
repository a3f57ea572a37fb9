"""Admin service for user management and reporting."""

from dataclasses import dataclass
from uuid import UUID

from foodlens.domain.models import UserRecord
from foodlens.domain.usage import USAGE_KINDS
from foodlens.services.clock import AppClock
from foodlens.services.maintenance import ReconciliationReport, ReconciliationService
from foodlens.services.subscriptions import SubscriptionService
from foodlens.services.usage import current_usage
from foodlens.services.users import UserRepository


@dataclass
class AdminService:
    """Service for the admin dashboard."""

    repository: UserRepository
    subscriptions: SubscriptionService
    reconciliation: ReconciliationService
    clock: AppClock

    def list_users(self) -> list[dict[str, object]]:
        """Return users with their effective tier, streak and usage today."""
        today_key = self.clock.date_key()
        summaries = []
        for user in self.repository.list_users():
            effective = self.subscriptions.resolve(user)
            usage = current_usage(user.usage, today_key)
            summaries.append(
                {
                    "id": str(user.id),
                    "email": user.email,
                    "name": user.name,
                    "subscription": {
                        "type": effective.type,
                        "expiresAt": effective.expires_at.isoformat()
                        if effective.expires_at
                        else None,
                    },
                    "streak": {
                        "current": user.streak.current,
                        "longest": user.streak.longest,
                    },
                    "usage": {kind: usage.count(kind) for kind in USAGE_KINDS},
                    "createdAt": user.created_at.isoformat()
                    if user.created_at
                    else None,
                }
            )
        return summaries

    def grant(
        self, user_id: UUID, subscription_type: str, duration_days: int | None = None
    ) -> UserRecord:
        """Change a user's subscription tier."""
        return self.subscriptions.grant(user_id, subscription_type, duration_days)

    def stats(self) -> dict[str, object]:
        """Return user counts and today's total usage."""
        today = self.clock.today()
        today_key = self.clock.date_key(today)
        users = self.repository.list_users()
        pro_users = 0
        active_today = 0
        usage_today = dict.fromkeys(USAGE_KINDS, 0)
        for user in users:
            if self.subscriptions.resolve(user).is_pro:
                pro_users += 1
            last_visit = user.streak.last_visit_at
            if last_visit is not None and self.clock.local_day(last_visit) == today:
                active_today += 1
            usage = current_usage(user.usage, today_key)
            for kind in USAGE_KINDS:
                usage_today[kind] += usage.count(kind)
        return {
            "totalUsers": len(users),
            "proUsers": pro_users,
            "freeUsers": len(users) - pro_users,
            "activeToday": active_today,
            "usageToday": usage_today,
        }

    def reconcile(self) -> ReconciliationReport:
        """Run a reconciliation pass on demand."""
        return self.reconciliation.run()
