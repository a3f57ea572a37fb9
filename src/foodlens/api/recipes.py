"""Recipe endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from foodlens.api.dependencies import current_user_id, get_container
from foodlens.api.schemas import (
    RecipeGenerateRequest,
    RecipeUpdateRequest,
    serialize_recipe,
)
from foodlens.containers import AppContainer

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


@router.get("")
async def list_recipes(
    goal: str | None = None,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the caller's recipes and the system catalogue."""
    recipes = container.recipe_service.list_visible(user_id, goal)
    return {"success": True, "recipes": [serialize_recipe(recipe) for recipe in recipes]}


@router.post("/generate")
async def generate_recipe(
    body: RecipeGenerateRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Generate and store a recipe for a dish."""
    recipe = await container.recipe_service.generate(
        user_id, body.dish_name, image=body.image
    )
    return {"success": True, "recipe": serialize_recipe(recipe)}


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return one recipe."""
    recipe = container.recipe_service.get(user_id, recipe_id)
    return {"success": True, "recipe": serialize_recipe(recipe)}


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: UUID,
    body: RecipeUpdateRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Edit one of the caller's recipes."""
    recipe = container.recipe_service.update(
        user_id, recipe_id, body.model_dump(exclude_unset=True)
    )
    return {"success": True, "recipe": serialize_recipe(recipe)}


@router.delete("/{recipe_id}")
async def delete_recipe(
    recipe_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Delete one of the caller's recipes."""
    container.recipe_service.delete(user_id, recipe_id)
    return {"success": True}


@router.post("/{recipe_id}/favorite")
async def add_favorite(
    recipe_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Mark a recipe as favorite."""
    recipe = container.recipe_service.set_favorite(user_id, recipe_id, True)
    return {"success": True, "recipe": serialize_recipe(recipe)}


@router.delete("/{recipe_id}/favorite")
async def remove_favorite(
    recipe_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Remove a recipe from favorites."""
    recipe = container.recipe_service.set_favorite(user_id, recipe_id, False)
    return {"success": True, "recipe": serialize_recipe(recipe)}
