"""Daily water intake."""

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Protocol
from uuid import UUID

from foodlens.domain.food import WaterIntake
from foodlens.errors import NotFound, ValidationError
from foodlens.services.clock import AppClock

if TYPE_CHECKING:
    from foodlens.services.users import UserRepository


class WaterRepository(Protocol):
    """Persistence interface for water intake."""

    def get_amount(self, user_id: UUID, date_key: str) -> int | None:
        """Return the stored amount for a date, if any."""

    def save_amount(self, user_id: UUID, date_key: str, amount_ml: int) -> None:
        """Insert or replace the amount for a date."""

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete every stored amount of a user."""


@dataclass
class WaterService:
    """Reads and replaces the per-day water total."""

    repository: WaterRepository
    users: "UserRepository"
    clock: AppClock

    def get(self, user_id: UUID, day: date | None = None) -> WaterIntake:
        """Return the water total for a day, zero when nothing is stored."""
        date_key = self.clock.date_key(day)
        amount = self.repository.get_amount(user_id, date_key)
        return WaterIntake(user_id=user_id, date=date_key, amount_ml=amount or 0)

    def save(self, user_id: UUID, day: date | None, amount_ml: int) -> WaterIntake:
        """Replace the water total for a day."""
        if amount_ml < 0:
            raise ValidationError("Water amount cannot be negative", field="amount")
        if self.users.get_user(user_id) is None:
            raise NotFound("User", user_id)
        date_key = self.clock.date_key(day)
        self.repository.save_amount(user_id, date_key, amount_ml)
        return WaterIntake(user_id=user_id, date=date_key, amount_ml=amount_ml)
