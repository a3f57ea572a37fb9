"""Domain models for user accounts."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from foodlens.domain.images import StoredImage
from foodlens.domain.usage import UsageBucket

FREE = "free"
PRO = "pro"
SUBSCRIPTION_TYPES = (FREE, PRO)


@dataclass(frozen=True)
class SubscriptionState:
    """Subscription tier as stored, before expiry is considered."""

    type: str = FREE
    expires_at: datetime | None = None


@dataclass(frozen=True)
class StreakState:
    """Consecutive-day activity counters."""

    current: int = 0
    longest: int = 0
    last_visit_at: datetime | None = None


@dataclass(frozen=True)
class UserProfile:
    """Nutrition targets and personal attributes."""

    goal: str | None = None
    gender: str | None = None
    age: int | None = None
    height_cm: float | None = None
    weight_kg: float | None = None
    target_weight_kg: float | None = None
    activity_level: str | None = None
    daily_calories: int = 2000
    protein_g: int = 130
    fat_g: int = 58
    carbs_g: int = 270
    water_target_ml: int = 2000
    allergies: tuple[str, ...] = ()


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: UUID
    email: str
    name: str
    profile: UserProfile = field(default_factory=UserProfile)
    subscription: SubscriptionState = field(default_factory=SubscriptionState)
    usage: UsageBucket = field(default_factory=UsageBucket)
    streak: StreakState = field(default_factory=StreakState)
    avatar: StoredImage | None = None
    created_at: datetime | None = None
