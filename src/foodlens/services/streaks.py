"""Consecutive-day activity streaks."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from foodlens.domain.models import StreakState
from foodlens.errors import NotFound
from foodlens.services.clock import AppClock

if TYPE_CHECKING:
    from foodlens.services.users import UserRepository

logger = logging.getLogger(__name__)


def advance_streak(state: StreakState, now: datetime, clock: AppClock) -> StreakState | None:
    """Return the streak after activity at ``now``.

    Returns None when activity was already recorded on the same local day, in
    which case nothing must be written.
    """
    visited_at = now.astimezone(UTC)
    if state.last_visit_at is None:
        return StreakState(
            current=1, longest=max(state.longest, 1), last_visit_at=visited_at
        )
    gap = clock.day_gap(state.last_visit_at, now)
    if gap <= 0:
        return None
    if gap == 1:
        current = 1 if state.current == 0 else state.current + 1
        return StreakState(
            current=current,
            longest=max(state.longest, current),
            last_visit_at=visited_at,
        )
    return StreakState(current=1, longest=max(state.longest, 1), last_visit_at=visited_at)


def expire_streak(state: StreakState, now: datetime, clock: AppClock) -> StreakState | None:
    """Return a zeroed streak when activity stopped two or more days ago."""
    if state.last_visit_at is None or state.current == 0:
        return None
    if clock.day_gap(state.last_visit_at, now) < 2:
        return None
    return replace(state, current=0)


@dataclass
class StreakService:
    """Records qualifying activity against the user's streak."""

    repository: "UserRepository"
    clock: AppClock

    def record_activity(self, user_id: UUID, at: datetime | None = None) -> StreakState:
        """Apply one activity and return the resulting counters."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        now = at or self.clock.now()
        updated = advance_streak(user.streak, now, self.clock)
        if updated is None:
            return user.streak
        self.repository.save_streak(user_id, updated)
        if updated.current == 1 and user.streak.current > 1:
            logger.info(
                "Streak restarted",
                extra={"user_id": str(user_id), "previous": user.streak.current},
            )
        return updated
