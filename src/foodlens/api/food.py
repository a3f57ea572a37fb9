"""Food diary and water endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile

from foodlens.api.dependencies import current_user_id, get_container
from foodlens.api.schemas import (
    DescriptionRequest,
    FoodEntryUpdateRequest,
    InlineImageRequest,
    WaterRequest,
    serialize_entry,
    serialize_favorite,
    serialize_progress,
    serialize_summary,
    serialize_water,
)
from foodlens.containers import AppContainer
from foodlens.services.food import AnalyzedEntry

router = APIRouter(prefix="/api/food", tags=["food"])


def _analyzed(result: AnalyzedEntry) -> dict[str, object]:
    return {
        "success": True,
        "entry": serialize_entry(result.entry),
        "analysis": result.analysis.model_dump(),
    }


@router.post("/analyze")
async def analyze_photo(
    image: UploadFile = File(...),
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Analyze an uploaded photo and log it."""
    return _analyzed(await container.food_service.analyze_upload(user_id, image))


@router.post("/analyze-image")
async def analyze_inline_image(
    body: InlineImageRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Analyze a base64 photo and log it."""
    return _analyzed(await container.food_service.analyze_inline(user_id, body.image))


@router.post("/analyze-description")
async def analyze_description(
    body: DescriptionRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Estimate a described dish and log it."""
    return _analyzed(
        await container.food_service.analyze_description(user_id, body.description)
    )


@router.post("/analyze-only")
async def analyze_only(
    body: DescriptionRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Estimate a described dish without logging it."""
    analysis = await container.food_service.preview_description(
        user_id, body.description
    )
    return {"success": True, "analysis": analysis.model_dump()}


@router.get("/history")
async def history(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return all diary entries, newest first."""
    entries = container.food_service.history(user_id)
    return {"success": True, "entries": [serialize_entry(entry) for entry in entries]}


@router.get("/daily-summary")
async def daily_summary(
    day: date | None = None,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return a day's totals against targets, today by default."""
    summary = container.food_service.daily_summary(user_id, day)
    return {"success": True, "summary": serialize_summary(summary)}


@router.get("/weekly-progress")
async def weekly_progress(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return calories against target for the last seven days."""
    progress = container.food_service.weekly_progress(user_id)
    return {"success": True, "days": [serialize_progress(day) for day in progress]}


@router.get("/monthly-active-days")
async def monthly_active_days(
    year: int,
    month: int,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the days of a month with diary entries."""
    days = container.food_service.monthly_active_days(user_id, year, month)
    return {"success": True, "days": [day.isoformat() for day in days]}


@router.get("/favorites/list")
async def list_favorites(
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the caller's favorite dishes."""
    favorites = container.food_service.favorites(user_id)
    return {
        "success": True,
        "favorites": [serialize_favorite(favorite) for favorite in favorites],
    }


@router.delete("/favorites/{favorite_id}")
async def remove_favorite(
    favorite_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Remove a dish from favorites."""
    container.food_service.remove_favorite(user_id, favorite_id)
    return {"success": True}


@router.post("/favorites/{favorite_id}/add-to-diary")
async def log_favorite(
    favorite_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Log a favorite dish to today's diary."""
    entry = container.food_service.log_favorite(user_id, favorite_id)
    return {"success": True, "entry": serialize_entry(entry)}


@router.get("/water/{day}")
async def get_water(
    day: date,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Return the water total for a date."""
    intake = container.water_service.get(user_id, day)
    return {"success": True, "water": serialize_water(intake)}


@router.post("/water")
async def save_water(
    body: WaterRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Replace the water total for a date."""
    intake = container.water_service.save(user_id, body.date, body.amount_ml)
    return {"success": True, "water": serialize_water(intake)}


@router.put("/{entry_id}")
async def update_entry(
    entry_id: UUID,
    body: FoodEntryUpdateRequest,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Edit a diary entry."""
    changes = body.model_dump(exclude_unset=True, exclude={"image"})
    entry = await container.food_service.update_entry(
        user_id, entry_id, changes, image=body.image
    )
    return {"success": True, "entry": serialize_entry(entry)}


@router.post("/{entry_id}/favorite")
async def add_favorite(
    entry_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Save a diary entry as a favorite dish."""
    favorite = container.food_service.add_favorite(user_id, entry_id)
    return {"success": True, "favorite": serialize_favorite(favorite)}


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: UUID,
    user_id: UUID = Depends(current_user_id),
    container: AppContainer = Depends(get_container),
) -> dict[str, object]:
    """Delete a diary entry."""
    container.food_service.delete_entry(user_id, entry_id)
    return {"success": True}
