"""Request bodies and response serializers for the HTTP API."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from foodlens.domain.ai import ChatTurn, RecipeIngredientDraft
from foodlens.domain.food import (
    DailySummary,
    DayProgress,
    FavoriteFood,
    FoodEntry,
    WaterIntake,
)
from foodlens.domain.images import image_data_url
from foodlens.domain.models import StreakState, UserRecord
from foodlens.domain.recipes import Recipe
from foodlens.errors import ValidationError


class RegisterRequest(BaseModel):
    """Body of the registration call."""

    email: str
    name: str


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; only fields that are sent are changed."""

    name: str | None = None
    goal: str | None = None
    gender: str | None = None
    age: int | None = Field(default=None, ge=0)
    height_cm: float | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, ge=0)
    target_weight_kg: float | None = Field(default=None, ge=0)
    activity_level: str | None = None
    daily_calories: int | None = Field(default=None, ge=0)
    protein_g: int | None = Field(default=None, ge=0)
    fat_g: int | None = Field(default=None, ge=0)
    carbs_g: int | None = Field(default=None, ge=0)
    water_target_ml: int | None = Field(default=None, ge=0)
    allergies: list[str] | None = None


class InlineImageRequest(BaseModel):
    """A base64 image or data URL."""

    image: str


class DescriptionRequest(BaseModel):
    """A free-text dish description."""

    description: str


class FoodEntryUpdateRequest(BaseModel):
    """Edits to a diary entry, with an optional replacement photo."""

    name: str | None = None
    calories: float | None = Field(default=None, ge=0)
    protein_g: float | None = Field(default=None, ge=0)
    fat_g: float | None = Field(default=None, ge=0)
    carbs_g: float | None = Field(default=None, ge=0)
    health_score: int | None = Field(default=None, ge=0, le=100)
    meal_type: str | None = None
    image: str | None = None


class WaterRequest(BaseModel):
    """New water total for a date."""

    date: date
    amount_ml: int


class ChatTurnPayload(BaseModel):
    """One earlier chat message sent back by the client."""

    role: Literal["user", "assistant"]
    text: str

    def to_turn(self) -> ChatTurn:
        """Convert to the domain model."""
        return ChatTurn(role=self.role, text=self.text)


class ChatRequest(BaseModel):
    """A chat message with the recent conversation."""

    message: str
    history: list[ChatTurnPayload] = Field(default_factory=list)



_HISTORY_ADAPTER = TypeAdapter(list[ChatTurnPayload])


def parse_chat_history(raw: str | None) -> list[ChatTurn]:
    """Parse chat history sent as a JSON string in a multipart form."""
    if not raw:
        return []
    try:
        turns = _HISTORY_ADAPTER.validate_json(raw)
    except PydanticValidationError as exc:
        raise ValidationError("Chat history is not valid", field="chat_history") from exc
    return [turn.to_turn() for turn in turns]


class RecipeGenerateRequest(BaseModel):
    """Dish to generate a recipe for, with an optional reference photo."""

    dish_name: str
    image: str | None = None


class RecipeUpdateRequest(BaseModel):
    """Edits to one of the caller's recipes."""

    name: str | None = None
    calories: float | None = Field(default=None, ge=0)
    protein_g: float | None = Field(default=None, ge=0)
    fat_g: float | None = Field(default=None, ge=0)
    carbs_g: float | None = Field(default=None, ge=0)
    prep_time_minutes: int | None = Field(default=None, ge=0)
    difficulty: str | None = None
    servings: int | None = Field(default=None, ge=1)
    ingredients: list[RecipeIngredientDraft] | None = None
    instructions: list[str] | None = None
    goal: str | None = None


class SubscriptionGrantRequest(BaseModel):
    """Admin change of a user's tier."""

    type: str
    duration_days: int | None = None


def serialize_entry(entry: FoodEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "name": entry.name,
        "calories": entry.calories,
        "protein_g": entry.protein_g,
        "fat_g": entry.fat_g,
        "carbs_g": entry.carbs_g,
        "health_score": entry.health_score,
        "meal_type": entry.meal_type,
        "logged_at": entry.logged_at.isoformat(),
        "image": image_data_url(entry.image),
    }


def serialize_favorite(favorite: FavoriteFood) -> dict[str, object]:
    return {
        "id": str(favorite.id),
        "name": favorite.name,
        "calories": favorite.calories,
        "protein_g": favorite.protein_g,
        "fat_g": favorite.fat_g,
        "carbs_g": favorite.carbs_g,
        "health_score": favorite.health_score,
        "added_at": favorite.added_at.isoformat() if favorite.added_at else None,
    }


def serialize_progress(progress: DayProgress) -> dict[str, object]:
    return {
        "date": progress.day.isoformat(),
        "calories": progress.calories,
        "target_calories": progress.target_calories,
        "percentage": progress.percentage,
        "entry_count": progress.entry_count,
    }


def serialize_summary(summary: DailySummary) -> dict[str, object]:
    return {
        "date": summary.day.isoformat(),
        "totals": {
            "calories": summary.calories,
            "protein_g": summary.protein_g,
            "fat_g": summary.fat_g,
            "carbs_g": summary.carbs_g,
        },
        "targets": {
            "calories": summary.target_calories,
            "protein_g": summary.target_protein_g,
            "fat_g": summary.target_fat_g,
            "carbs_g": summary.target_carbs_g,
        },
        "water": {"amount_ml": summary.water_ml, "target_ml": summary.water_target_ml},
        "entries": [serialize_entry(entry) for entry in summary.entries],
    }


def serialize_water(intake: WaterIntake) -> dict[str, object]:
    return {"date": intake.date, "amount_ml": intake.amount_ml}


def serialize_recipe(recipe: Recipe) -> dict[str, object]:
    return {
        "id": str(recipe.id),
        "owner": recipe.owner,
        "is_system": recipe.is_system,
        "name": recipe.name,
        "calories": recipe.calories,
        "protein_g": recipe.protein_g,
        "fat_g": recipe.fat_g,
        "carbs_g": recipe.carbs_g,
        "prep_time_minutes": recipe.prep_time_minutes,
        "difficulty": recipe.difficulty,
        "servings": recipe.servings,
        "ingredients": [
            {
                "name": ingredient.name,
                "amount": ingredient.amount,
                "unit": ingredient.unit,
                "calories": ingredient.calories,
            }
            for ingredient in recipe.ingredients
        ],
        "instructions": list(recipe.instructions),
        "goal": recipe.goal,
        "is_favorite": recipe.is_favorite,
        "image": image_data_url(recipe.image),
        "created_at": recipe.created_at.isoformat() if recipe.created_at else None,
    }


def serialize_streak(streak: StreakState) -> dict[str, int]:
    return {"current": streak.current, "longest": streak.longest}


def serialize_user(user: UserRecord, limits: dict[str, object]) -> dict[str, object]:
    """Return the profile view, with tier and usage taken from the limits overview."""
    profile = user.profile
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "profile": {
            "goal": profile.goal,
            "gender": profile.gender,
            "age": profile.age,
            "height_cm": profile.height_cm,
            "weight_kg": profile.weight_kg,
            "target_weight_kg": profile.target_weight_kg,
            "activity_level": profile.activity_level,
            "daily_calories": profile.daily_calories,
            "protein_g": profile.protein_g,
            "fat_g": profile.fat_g,
            "carbs_g": profile.carbs_g,
            "water_target_ml": profile.water_target_ml,
            "allergies": list(profile.allergies),
        },
        "subscription": limits["subscription"],
        "usage": limits["usage"],
        "streak": serialize_streak(user.streak),
        "avatar": image_data_url(user.avatar),
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }
