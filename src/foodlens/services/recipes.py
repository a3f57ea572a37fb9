"""AI-generated recipes and the shared recipe catalogue."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from foodlens.domain.ai import RecipeDraft
from foodlens.domain.images import RECIPE_PROFILE, StoredImage
from foodlens.domain.recipes import (
    DIFFICULTIES,
    SYSTEM_OWNER,
    Recipe,
    RecipeIngredient,
)
from foodlens.domain.usage import RECIPES
from foodlens.errors import NotFound, ValidationError
from foodlens.services.ai import NutritionAIService
from foodlens.services.images import ImagePipeline
from foodlens.services.limits import LimitGate
from foodlens.services.users import UserRepository, require_user

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
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
        "goal",
    }
)


class RecipeRepository(Protocol):
    """Persistence interface for recipes."""

    def create_recipe(
        self,
        owner: str,
        draft: RecipeDraft,
        image: StoredImage | None,
        goal: str | None,
    ) -> Recipe:
        """Store a recipe and return it."""

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id, if present."""

    def list_recipes(self, owners: list[str]) -> list[Recipe]:
        """Return recipes belonging to any of the owners, newest first."""

    def set_favorite(self, recipe_id: UUID, is_favorite: bool) -> None:
        """Mark or unmark a recipe as favorite."""

    def update_recipe(self, recipe_id: UUID, changes: dict[str, object]) -> Recipe:
        """Apply field changes and return the updated recipe."""

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe."""

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete every recipe owned by a user."""


@dataclass
class RecipeService:
    """Application service for recipes."""

    repository: RecipeRepository
    users: UserRepository
    gate: LimitGate
    pipeline: ImagePipeline
    ai: NutritionAIService

    async def generate(
        self, user_id: UUID, dish_name: str, image: str | None = None
    ) -> Recipe:
        """Have the AI draft a recipe and store it for the user."""
        name = dish_name.strip()
        if not name:
            raise ValidationError("Dish name is required", field="dish_name")
        user = require_user(self.users, user_id)
        async with self.gate.metered(user_id, RECIPES) as context:
            reference = None
            if image:
                reference = await self.pipeline.from_inline(
                    image, is_pro=context.is_pro, profile=RECIPE_PROFILE
                )
            draft = await self.ai.generate_recipe(name, user.profile, reference)
            if not draft.name.strip():
                draft = draft.model_copy(update={"name": name})
            recipe = self.repository.create_recipe(
                str(user_id), draft, image=reference, goal=user.profile.goal
            )
        logger.info(
            "Generated recipe",
            extra={"user_id": str(user_id), "recipe_id": str(recipe.id)},
        )
        return recipe

    def list_visible(self, user_id: UUID, goal: str | None = None) -> list[Recipe]:
        """Return the user's own recipes followed by the system catalogue."""
        require_user(self.users, user_id)
        recipes = self.repository.list_recipes([str(user_id), SYSTEM_OWNER])
        if goal:
            recipes = [recipe for recipe in recipes if recipe.goal == goal]
        return sorted(recipes, key=lambda recipe: recipe.is_system)

    def get(self, user_id: UUID, recipe_id: UUID) -> Recipe:
        """Return a recipe visible to the user."""
        recipe = self.repository.get_recipe(recipe_id)
        if recipe is None or not (recipe.is_system or recipe.owner == str(user_id)):
            raise NotFound("Recipe", recipe_id)
        return recipe

    def set_favorite(self, user_id: UUID, recipe_id: UUID, is_favorite: bool) -> Recipe:
        """Mark or unmark one of the user's recipes as favorite."""
        recipe = self._owned(user_id, recipe_id, "System recipes cannot be modified")
        self.repository.set_favorite(recipe_id, is_favorite)
        return replace(recipe, is_favorite=is_favorite)

    def update(
        self, user_id: UUID, recipe_id: UUID, changes: dict[str, object]
    ) -> Recipe:
        """Edit one of the user's recipes."""
        self._owned(user_id, recipe_id, "System recipes cannot be modified")
        values = _validate_changes(changes)
        if not values:
            raise ValidationError("Nothing to update")
        return self.repository.update_recipe(recipe_id, values)

    def delete(self, user_id: UUID, recipe_id: UUID) -> None:
        """Delete one of the user's recipes."""
        self._owned(user_id, recipe_id, "System recipes cannot be deleted")
        self.repository.delete_recipe(recipe_id)

    def _owned(self, user_id: UUID, recipe_id: UUID, system_message: str) -> Recipe:
        recipe = self.get(user_id, recipe_id)
        if recipe.is_system:
            raise ValidationError(system_message, field="id")
        return recipe


def _validate_changes(changes: dict[str, object]) -> dict[str, object]:
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        field = sorted(unknown)[0]
        raise ValidationError(f"Field cannot be edited: {field}", field=field)
    values = {name: value for name, value in changes.items() if value is not None}
    if "name" in values:
        values["name"] = str(values["name"]).strip()
        if not values["name"]:
            raise ValidationError("Name is required", field="name")
    if "difficulty" in values and values["difficulty"] not in DIFFICULTIES:
        raise ValidationError(
            f"difficulty must be one of {', '.join(DIFFICULTIES)}", field="difficulty"
        )
    if "ingredients" in values:
        values["ingredients"] = [
            RecipeIngredient(**dict(item)) for item in values["ingredients"]
        ]
    if "instructions" in values:
        values["instructions"] = [str(step) for step in values["instructions"]]
    return values
