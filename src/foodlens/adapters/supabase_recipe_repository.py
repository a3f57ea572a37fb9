"""Supabase repository for recipes."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from foodlens.adapters.supabase_rows import image_columns, parse_image, parse_timestamp
from foodlens.domain.ai import RecipeDraft
from foodlens.domain.images import StoredImage
from foodlens.domain.recipes import Recipe, RecipeIngredient
from foodlens.services.recipes import RecipeRepository

RECIPE_COLUMNS = (
    "id, owner, name, calories, protein_g, fat_g, carbs_g, prep_time_minutes, "
    "difficulty, servings, ingredients, instructions, goal, is_favorite, image, "
    "image_content_type, created_at"
)


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipes."""

    client: Client

    def create_recipe(
        self,
        owner: str,
        draft: RecipeDraft,
        image: StoredImage | None,
        goal: str | None,
    ) -> Recipe:
        """Create a recipe row and return it."""
        response = (
            self.client.table("recipes")
            .insert(
                {
                    "owner": owner,
                    "name": draft.name,
                    "calories": draft.calories,
                    "protein_g": draft.protein_g,
                    "fat_g": draft.fat_g,
                    "carbs_g": draft.carbs_g,
                    "prep_time_minutes": draft.prep_time_minutes,
                    "difficulty": draft.difficulty,
                    "servings": draft.servings,
                    "ingredients": [
                        ingredient.model_dump() for ingredient in draft.ingredients
                    ],
                    "instructions": list(draft.instructions),
                    "goal": goal,
                    "is_favorite": False,
                    **image_columns(image),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe")
        return _parse_recipe(response.data[0])

    def get_recipe(self, recipe_id: UUID) -> Recipe | None:
        """Return a recipe by id."""
        response = (
            self.client.table("recipes")
            .select(RECIPE_COLUMNS)
            .eq("id", str(recipe_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def list_recipes(self, owners: list[str]) -> list[Recipe]:
        """Return recipes of the given owners, newest first."""
        response = (
            self.client.table("recipes")
            .select(RECIPE_COLUMNS)
            .in_("owner", owners)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def set_favorite(self, recipe_id: UUID, is_favorite: bool) -> None:
        """Update the favorite flag."""
        self.client.table("recipes").update({"is_favorite": is_favorite}).eq(
            "id", str(recipe_id)
        ).execute()

    def update_recipe(self, recipe_id: UUID, changes: dict[str, object]) -> Recipe:
        """Update recipe columns and return the stored row."""
        payload = dict(changes)
        if "ingredients" in payload:
            payload["ingredients"] = [
                {
                    "name": ingredient.name,
                    "amount": ingredient.amount,
                    "unit": ingredient.unit,
                    "calories": ingredient.calories,
                }
                for ingredient in payload["ingredients"]
            ]
        response = (
            self.client.table("recipes")
            .update(payload)
            .eq("id", str(recipe_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update recipe")
        return _parse_recipe(response.data[0])

    def delete_recipe(self, recipe_id: UUID) -> None:
        """Delete a recipe row."""
        self.client.table("recipes").delete().eq("id", str(recipe_id)).execute()

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete the recipes a user owns."""
        self.client.table("recipes").delete().eq("owner", str(user_id)).execute()


def _parse_recipe(row: dict[str, object]) -> Recipe:
    return Recipe(
        id=UUID(str(row["id"])),
        owner=str(row["owner"]),
        name=str(row.get("name", "")),
        calories=float(row.get("calories") or 0.0),
        protein_g=float(row.get("protein_g") or 0.0),
        fat_g=float(row.get("fat_g") or 0.0),
        carbs_g=float(row.get("carbs_g") or 0.0),
        prep_time_minutes=int(row.get("prep_time_minutes") or 0),
        difficulty=str(row.get("difficulty") or "medium"),
        servings=int(row.get("servings") or 1),
        ingredients=[
            RecipeIngredient(
                name=str(item.get("name", "")),
                amount=str(item.get("amount", "")),
                unit=str(item.get("unit", "")),
                calories=float(item.get("calories") or 0.0),
            )
            for item in row.get("ingredients") or []
        ],
        instructions=[str(step) for step in row.get("instructions") or []],
        goal=row.get("goal"),
        is_favorite=bool(row.get("is_favorite")),
        image=parse_image(row),
        created_at=parse_timestamp(row.get("created_at")),
    )
