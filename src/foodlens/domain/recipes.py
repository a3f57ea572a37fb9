"""Domain models for recipes."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from foodlens.domain.images import StoredImage

SYSTEM_OWNER = "system"
DIFFICULTIES = ("easy", "medium", "hard")


@dataclass(frozen=True)
class RecipeIngredient:
    """One ingredient row of a recipe."""

    name: str
    amount: str
    unit: str
    calories: float = 0.0


@dataclass(frozen=True)
class Recipe:
    """A stored recipe owned by a user or by the system catalogue."""

    id: UUID
    owner: str
    name: str
    calories: float
    protein_g: float
    fat_g: float
    carbs_g: float
    prep_time_minutes: int
    difficulty: str
    servings: int
    ingredients: list[RecipeIngredient] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    goal: str | None = None
    is_favorite: bool = False
    image: StoredImage | None = None
    created_at: datetime | None = None

    @property
    def is_system(self) -> bool:
        """Return True for built-in catalogue recipes."""
        return self.owner == SYSTEM_OWNER
