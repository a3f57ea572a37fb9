"""Models for structured AI results."""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field, field_validator

from foodlens.domain.food import DEFAULT_HEALTH_SCORE, FoodEntry
from foodlens.domain.models import UserProfile

FALLBACK_DISH_NAME = "Dish"


class FoodAnalysis(BaseModel):
    """Calorie and macro estimate for a dish."""

    name: str
    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    health_score: int = Field(default=DEFAULT_HEALTH_SCORE, ge=0, le=100)

    @field_validator("name")
    @classmethod
    def _fallback_name(cls, value: str) -> str:
        cleaned = value.strip()
        return cleaned or FALLBACK_DISH_NAME


class RecipeIngredientDraft(BaseModel):
    """Ingredient row proposed by the model."""

    name: str
    amount: str
    unit: str
    calories: float = Field(default=0.0, ge=0.0)


class RecipeDraft(BaseModel):
    """Recipe proposed by the model, before it is stored."""

    name: str
    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    prep_time_minutes: int = Field(ge=0)
    difficulty: str = "medium"
    servings: int = Field(ge=1)
    ingredients: list[RecipeIngredientDraft]
    instructions: list[str]


@dataclass(frozen=True)
class ChatTurn:
    """One earlier message of a chat conversation."""

    role: str
    text: str


@dataclass(frozen=True)
class ChatContext:
    """What the assistant knows about the user when replying."""

    user_name: str
    profile: UserProfile
    today_entries: list[FoodEntry] = field(default_factory=list)
    history: list[ChatTurn] = field(default_factory=list)
