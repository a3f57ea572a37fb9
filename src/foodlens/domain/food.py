"""Domain models for the food diary and water tracking."""

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from foodlens.domain.images import StoredImage

BREAKFAST = "breakfast"
LUNCH = "lunch"
DINNER = "dinner"
SNACK = "snack"
MEAL_TYPES = (BREAKFAST, LUNCH, DINNER, SNACK)
DEFAULT_HEALTH_SCORE = 50


@dataclass(frozen=True)
class FoodEntryDraft:
    """Values for a diary entry that has not been stored yet."""

    name: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    health_score: int
    meal_type: str
    logged_at: datetime
    image: StoredImage | None = None


@dataclass(frozen=True)
class FoodEntry:
    """A stored diary entry."""

    id: UUID
    user_id: UUID
    name: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    health_score: int
    meal_type: str
    logged_at: datetime
    image: StoredImage | None = None


@dataclass(frozen=True)
class DailySummary:
    """Diary totals for one local day against the user's targets."""

    day: date
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    target_calories: int
    target_protein_g: int
    target_fat_g: int
    target_carbs_g: int
    water_ml: int
    water_target_ml: int
    entries: list[FoodEntry]


@dataclass(frozen=True)
class WaterIntake:
    """Water total for one user and calendar date."""

    user_id: UUID
    date: str
    amount_ml: int


def meal_type_for_hour(hour: int) -> str:
    """Return the meal slot for a local hour of day."""
    if 6 <= hour < 12:
        return BREAKFAST
    if 12 <= hour < 16:
        return LUNCH
    if 16 <= hour < 21:
        return DINNER
    return SNACK


@dataclass(frozen=True)
class FavoriteFood:
    """A dish saved by a user for quick re-logging."""

    id: UUID
    user_id: UUID
    name: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    health_score: int = DEFAULT_HEALTH_SCORE
    added_at: datetime | None = None


@dataclass(frozen=True)
class DayProgress:
    """Calories eaten on one local day against the target."""

    day: date
    calories: float
    target_calories: int
    entry_count: int

    @property
    def percentage(self) -> int:
        """Share of the calorie target eaten, rounded; 0 without a target."""
        if self.target_calories <= 0:
            return 0
        return round(self.calories / self.target_calories * 100)
