"""Nutrition estimates, recipes and chat replies from an LLM."""

from dataclasses import dataclass
from typing import Protocol

from foodlens.domain.ai import ChatContext, ChatTurn, FoodAnalysis, RecipeDraft
from foodlens.domain.food import FoodEntry
from foodlens.domain.images import StoredImage
from foodlens.domain.models import UserProfile

CHAT_HISTORY_TURNS = 6

_NUMBER = {"type": "number", "minimum": 0}

FOOD_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": _NUMBER,
        "protein_g": _NUMBER,
        "fat_g": _NUMBER,
        "carbs_g": _NUMBER,
        "health_score": {"type": "integer", "minimum": 0, "maximum": 100},
    },
    "required": ["name", "calories", "protein_g", "fat_g", "carbs_g", "health_score"],
    "additionalProperties": False,
}

RECIPE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": _NUMBER,
        "protein_g": _NUMBER,
        "fat_g": _NUMBER,
        "carbs_g": _NUMBER,
        "prep_time_minutes": {"type": "integer", "minimum": 0},
        "difficulty": {"type": "string", "enum": ["easy", "medium", "hard"]},
        "servings": {"type": "integer", "minimum": 1},
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "amount": {"type": "string"},
                    "unit": {"type": "string"},
                    "calories": _NUMBER,
                },
                "required": ["name", "amount", "unit", "calories"],
                "additionalProperties": False,
            },
        },
        "instructions": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "name",
        "calories",
        "protein_g",
        "fat_g",
        "carbs_g",
        "prep_time_minutes",
        "difficulty",
        "servings",
        "ingredients",
        "instructions",
    ],
    "additionalProperties": False,
}

NUTRITIONIST_INSTRUCTIONS = (
    "You are a professional nutritionist. Estimate calories and macronutrients "
    "from standard food composition data. Count every portion mentioned. "
    "If the subject is not food, return zero calories and macros. "
    "health_score is 0-30 for junk food, 31-60 for mixed dishes and 61-100 for "
    "wholesome food such as vegetables, fruit, lean meat and porridge."
)

CHEF_INSTRUCTIONS = (
    "You are a professional chef and nutritionist. Write precise, realistic "
    "recipes. Calories and macros are per serving. Instructions are ordered "
    "steps, one per list element."
)

ASSISTANT_INSTRUCTIONS = (
    "You are FoodLens, a friendly nutrition assistant. Answer briefly and "
    "concretely, using the user's targets and today's diary when relevant. "
    "Never give medical diagnoses."
)


class NutritionAIClient(Protocol):
    """Interface for the LLM provider."""

    async def complete_json(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return a structured response matching the schema."""

    async def complete_text(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        history: list[ChatTurn] | None = None,
        image_data_url: str | None = None,
    ) -> str:
        """Return a free-text reply, optionally about an attached image."""


@dataclass
class NutritionAIService:
    """Builds prompts for nutrition tasks and validates the answers."""

    client: NutritionAIClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze_image(
        self, image: StoredImage, dish_hint: str | None = None
    ) -> FoodAnalysis:
        """Estimate the dish shown in a compressed photo."""
        prompt = "Identify the dish in the photo and estimate its nutrition."
        if dish_hint:
            prompt += f' The user says the photo shows "{dish_hint}".'
        raw = await self._json(
            NUTRITIONIST_INSTRUCTIONS,
            prompt,
            FOOD_ANALYSIS_SCHEMA,
            "food_analysis",
            image_data_url=image.to_data_url(),
        )
        return FoodAnalysis.model_validate(raw)

    async def analyze_description(self, description: str) -> FoodAnalysis:
        """Estimate a dish from a free-text description."""
        prompt = (
            f'Description: "{description}". Name the dish including quantities '
            "and estimate its nutrition."
        )
        raw = await self._json(
            NUTRITIONIST_INSTRUCTIONS, prompt, FOOD_ANALYSIS_SCHEMA, "food_analysis"
        )
        return FoodAnalysis.model_validate(raw)

    async def generate_recipe(
        self,
        dish_name: str,
        profile: UserProfile,
        image: StoredImage | None = None,
    ) -> RecipeDraft:
        """Draft a recipe for a dish, optionally matching a reference photo."""
        lines = [f'Create a detailed recipe for "{dish_name}".']
        if image is not None:
            lines.append("Use the attached photo as the reference for the dish.")
        if profile.goal:
            lines.append(f"The user's goal is {profile.goal}.")
        if profile.allergies:
            lines.append(f"Avoid these allergens: {', '.join(profile.allergies)}.")
        raw = await self._json(
            CHEF_INSTRUCTIONS,
            " ".join(lines),
            RECIPE_SCHEMA,
            "recipe",
            image_data_url=image.to_data_url() if image else None,
        )
        return RecipeDraft.model_validate(raw)

    async def chat(
        self, message: str, context: ChatContext, image: StoredImage | None = None
    ) -> str:
        """Reply to a chat message with the user's context attached."""
        prompt = f"{_describe_context(context)}\n\nUser message: {message}"
        return await self.client.complete_text(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=ASSISTANT_INSTRUCTIONS,
            prompt=prompt,
            history=context.history[-CHAT_HISTORY_TURNS:],
            image_data_url=image.to_data_url() if image else None,
        )

    async def daily_summary(self, context: ChatContext) -> str:
        """Write an analysis of today's diary with advice for tomorrow."""
        prompt = (
            f"{_describe_context(context)}\n\n"
            "Analyse my day of eating: how close I am to my calorie and macro "
            "targets, the balance and quality of the dishes, concrete advice for "
            "tomorrow and what to add or remove. Keep it structured and "
            "motivating."
        )
        return await self.client.complete_text(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=ASSISTANT_INSTRUCTIONS,
            prompt=prompt,
        )

    async def _json(
        self,
        instructions: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        return await self.client.complete_json(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            instructions=instructions,
            prompt=prompt,
            schema=schema,
            schema_name=schema_name,
            image_data_url=image_data_url,
        )


def _describe_context(context: ChatContext) -> str:
    profile = context.profile
    lines = [
        f"User: {context.user_name}",
        f"Goal: {profile.goal or 'not set'}",
        (
            f"Daily targets: {profile.daily_calories} kcal, "
            f"protein {profile.protein_g} g, fat {profile.fat_g} g, "
            f"carbs {profile.carbs_g} g, water {profile.water_target_ml} ml"
        ),
    ]
    if profile.weight_kg is not None:
        lines.append(f"Weight: {profile.weight_kg} kg")
    if profile.target_weight_kg is not None:
        lines.append(f"Target weight: {profile.target_weight_kg} kg")
    if profile.allergies:
        lines.append(f"Allergies: {', '.join(profile.allergies)}")
    lines.append(_describe_entries(context.today_entries))
    return "\n".join(lines)


def _describe_entries(entries: list[FoodEntry]) -> str:
    if not entries:
        return "Eaten today: nothing logged yet"
    calories = sum(entry.calories for entry in entries)
    protein = sum(entry.protein_g for entry in entries)
    fat = sum(entry.fat_g for entry in entries)
    carbs = sum(entry.carbs_g for entry in entries)
    dishes = ", ".join(f"{entry.name} ({entry.meal_type})" for entry in entries)
    return (
        f"Eaten today: {calories:.0f} kcal, protein {protein:.0f} g, "
        f"fat {fat:.0f} g, carbs {carbs:.0f} g. Dishes ({len(entries)}): {dishes}"
    )
