"""Supabase repository for food diary entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from foodlens.adapters.supabase_rows import image_columns, parse_image, parse_timestamp
from foodlens.domain.food import (
    DEFAULT_HEALTH_SCORE,
    SNACK,
    FavoriteFood,
    FoodEntry,
    FoodEntryDraft,
)
from foodlens.services.food import FoodRepository

ENTRY_COLUMNS = (
    "id, user_id, name, calories, protein_g, fat_g, carbs_g, health_score, "
    "meal_type, logged_at, image, image_content_type"
)
FAVORITE_COLUMNS = (
    "id, user_id, name, calories, protein_g, fat_g, carbs_g, health_score, added_at"
)


@dataclass
class SupabaseFoodRepository(FoodRepository):
    """Supabase implementation for diary entries."""

    client: Client

    def create_entry(self, user_id: UUID, draft: FoodEntryDraft) -> FoodEntry:
        """Create an entry row and return it."""
        response = (
            self.client.table("food_entries")
            .insert(
                {
                    "user_id": str(user_id),
                    "name": draft.name,
                    "calories": draft.calories,
                    "protein_g": draft.protein_g,
                    "fat_g": draft.fat_g,
                    "carbs_g": draft.carbs_g,
                    "health_score": draft.health_score,
                    "meal_type": draft.meal_type,
                    "logged_at": draft.logged_at.isoformat(),
                    **image_columns(draft.image),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_entry(response.data[0])

    def get_entry(self, entry_id: UUID) -> FoodEntry | None:
        """Return an entry by id."""
        response = (
            self.client.table("food_entries")
            .select(ENTRY_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def list_entries(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[FoodEntry]:
        """Return a user's entries in a time range, newest first."""
        query = (
            self.client.table("food_entries")
            .select(ENTRY_COLUMNS)
            .eq("user_id", str(user_id))
        )
        if start is not None:
            query = query.gte("logged_at", start.isoformat())
        if end is not None:
            query = query.lt("logged_at", end.isoformat())
        response = query.order("logged_at", desc=True).execute()
        return [_parse_entry(row) for row in response.data or []]

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> FoodEntry:
        """Update entry columns and return the stored row."""
        payload = dict(changes)
        if "image" in payload:
            payload.update(image_columns(payload.pop("image")))
        response = (
            self.client.table("food_entries")
            .update(payload)
            .eq("id", str(entry_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update food entry")
        return _parse_entry(response.data[0])

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry row."""
        self.client.table("food_entries").delete().eq("id", str(entry_id)).execute()

    def create_favorite(self, user_id: UUID, entry: FoodEntry) -> FavoriteFood:
        """Insert a favorite row copied from an entry."""
        response = (
            self.client.table("favorite_foods")
            .insert(
                {
                    "user_id": str(user_id),
                    "name": entry.name,
                    "calories": entry.calories,
                    "protein_g": entry.protein_g,
                    "fat_g": entry.fat_g,
                    "carbs_g": entry.carbs_g,
                    "health_score": entry.health_score,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create favorite food")
        return _parse_favorite(response.data[0])

    def get_favorite(self, favorite_id: UUID) -> FavoriteFood | None:
        """Return a favorite by id."""
        response = (
            self.client.table("favorite_foods")
            .select(FAVORITE_COLUMNS)
            .eq("id", str(favorite_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_favorite(response.data[0])

    def list_favorites(self, user_id: UUID) -> list[FavoriteFood]:
        """Return a user's favorites, newest first."""
        response = (
            self.client.table("favorite_foods")
            .select(FAVORITE_COLUMNS)
            .eq("user_id", str(user_id))
            .order("added_at", desc=True)
            .execute()
        )
        return [_parse_favorite(row) for row in response.data or []]

    def delete_favorite(self, favorite_id: UUID) -> None:
        """Delete a favorite row."""
        self.client.table("favorite_foods").delete().eq("id", str(favorite_id)).execute()

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete a user's entries and favorites."""
        for table in ("food_entries", "favorite_foods"):
            self.client.table(table).delete().eq("user_id", str(user_id)).execute()


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    return FoodEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        calories=float(row.get("calories") or 0.0),
        protein_g=float(row.get("protein_g") or 0.0),
        fat_g=float(row.get("fat_g") or 0.0),
        carbs_g=float(row.get("carbs_g") or 0.0),
        health_score=_health_score(row.get("health_score")),
        meal_type=str(row.get("meal_type") or SNACK),
        logged_at=parse_timestamp(row["logged_at"]),
        image=parse_image(row),
    )


def _health_score(value: object) -> int:
    return DEFAULT_HEALTH_SCORE if value is None else int(value)


def _parse_favorite(row: dict[str, object]) -> FavoriteFood:
    return FavoriteFood(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        calories=float(row.get("calories") or 0.0),
        protein_g=float(row.get("protein_g") or 0.0),
        fat_g=float(row.get("fat_g") or 0.0),
        carbs_g=float(row.get("carbs_g") or 0.0),
        health_score=_health_score(row.get("health_score")),
        added_at=parse_timestamp(row.get("added_at")),
    )
