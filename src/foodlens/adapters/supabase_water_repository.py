"""Supabase repository for water intake."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from foodlens.services.water import WaterRepository


@dataclass
class SupabaseWaterRepository(WaterRepository):
    """Supabase implementation keyed by (user_id, date)."""

    client: Client

    def get_amount(self, user_id: UUID, date_key: str) -> int | None:
        """Return the stored amount for a date."""
        response = (
            self.client.table("water_intake")
            .select("amount_ml")
            .eq("user_id", str(user_id))
            .eq("date", date_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return int(response.data[0].get("amount_ml") or 0)

    def save_amount(self, user_id: UUID, date_key: str, amount_ml: int) -> None:
        """Insert or replace the amount for a date."""
        self.client.table("water_intake").upsert(
            {"user_id": str(user_id), "date": date_key, "amount_ml": amount_ml},
            on_conflict="user_id,date",
        ).execute()

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete every water row of a user."""
        self.client.table("water_intake").delete().eq("user_id", str(user_id)).execute()
