"""Supabase-backed user repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from foodlens.adapters.supabase_rows import (
    format_timestamp,
    image_columns,
    parse_image,
    parse_timestamp,
)
from foodlens.domain.images import StoredImage
from foodlens.domain.models import (
    FREE,
    StreakState,
    SubscriptionState,
    UserProfile,
    UserRecord,
)
from foodlens.domain.usage import UsageBucket
from foodlens.services.users import UserRepository

USER_COLUMNS = (
    "id, email, name, created_at, goal, gender, age, height_cm, weight_kg, "
    "target_weight_kg, activity_level, daily_calories, protein_g, fat_g, carbs_g, "
    "water_target_ml, allergies, subscription_type, subscription_expires_at, "
    "usage_date, photos_count, messages_count, recipes_count, streak_current, "
    "streak_longest, last_visit_at, avatar, avatar_content_type"
)


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""
        response = (
            self.client.table("users")
            .select(USER_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def get_by_email(self, email: str) -> UserRecord | None:
        """Return the user registered with an email, if present."""
        response = (
            self.client.table("users")
            .select(USER_COLUMNS)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def create_user(self, email: str, name: str) -> UserRecord:
        """Create a new user row and return it."""
        response = (
            self.client.table("users")
            .insert({"email": email, "name": name, "subscription_type": FREE})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""
        response = (
            self.client.table("users")
            .select(USER_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_user(row) for row in response.data or []]

    def update_profile(self, user_id: UUID, name: str, profile: UserProfile) -> None:
        """Replace the name and profile columns."""
        self.client.table("users").update(
            {
                "name": name,
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
            }
        ).eq("id", str(user_id)).execute()

    def save_subscription(self, user_id: UUID, subscription: SubscriptionState) -> None:
        """Persist the subscription tier and expiry."""
        self.client.table("users").update(
            {
                "subscription_type": subscription.type,
                "subscription_expires_at": format_timestamp(subscription.expires_at),
            }
        ).eq("id", str(user_id)).execute()

    def save_usage(self, user_id: UUID, usage: UsageBucket) -> None:
        """Overwrite the daily usage bucket."""
        self.client.table("users").update(
            {
                "usage_date": usage.date,
                "photos_count": usage.photos_count,
                "messages_count": usage.messages_count,
                "recipes_count": usage.recipes_count,
            }
        ).eq("id", str(user_id)).execute()

    def save_streak(self, user_id: UUID, streak: StreakState) -> None:
        """Persist streak counters and the last visit."""
        self.client.table("users").update(
            {
                "streak_current": streak.current,
                "streak_longest": streak.longest,
                "last_visit_at": format_timestamp(streak.last_visit_at),
            }
        ).eq("id", str(user_id)).execute()

    def save_avatar(self, user_id: UUID, avatar: StoredImage) -> None:
        """Persist the compressed avatar."""
        self.client.table("users").update(image_columns(avatar, "avatar")).eq(
            "id", str(user_id)
        ).execute()

    def delete_user(self, user_id: UUID) -> None:
        """Delete the user row."""
        self.client.table("users").delete().eq("id", str(user_id)).execute()


def _parse_user(row: dict[str, object]) -> UserRecord:
    defaults = UserProfile()
    profile = UserProfile(
        goal=row.get("goal"),
        gender=row.get("gender"),
        age=row.get("age"),
        height_cm=row.get("height_cm"),
        weight_kg=row.get("weight_kg"),
        target_weight_kg=row.get("target_weight_kg"),
        activity_level=row.get("activity_level"),
        daily_calories=int(row.get("daily_calories") or defaults.daily_calories),
        protein_g=int(row.get("protein_g") or defaults.protein_g),
        fat_g=int(row.get("fat_g") or defaults.fat_g),
        carbs_g=int(row.get("carbs_g") or defaults.carbs_g),
        water_target_ml=int(row.get("water_target_ml") or defaults.water_target_ml),
        allergies=tuple(row.get("allergies") or ()),
    )
    return UserRecord(
        id=UUID(str(row["id"])),
        email=str(row.get("email", "")),
        name=str(row.get("name") or ""),
        profile=profile,
        subscription=SubscriptionState(
            type=str(row.get("subscription_type") or FREE),
            expires_at=parse_timestamp(row.get("subscription_expires_at")),
        ),
        usage=UsageBucket(
            date=row.get("usage_date"),
            photos_count=int(row.get("photos_count") or 0),
            messages_count=int(row.get("messages_count") or 0),
            recipes_count=int(row.get("recipes_count") or 0),
        ),
        streak=StreakState(
            current=int(row.get("streak_current") or 0),
            longest=int(row.get("streak_longest") or 0),
            last_visit_at=parse_timestamp(row.get("last_visit_at")),
        ),
        avatar=parse_image(row, "avatar"),
        created_at=parse_timestamp(row.get("created_at")),
    )
