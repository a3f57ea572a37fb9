"""Food diary: photo and text analysis, history and daily totals."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Protocol
from uuid import UUID

from foodlens.domain.ai import FoodAnalysis
from foodlens.domain.food import (
    MEAL_TYPES,
    DailySummary,
    DayProgress,
    FavoriteFood,
    FoodEntry,
    FoodEntryDraft,
    meal_type_for_hour,
)
from foodlens.domain.images import ANALYSIS_PROFILE, FOOD_PROFILE, StoredImage
from foodlens.domain.usage import PHOTOS
from foodlens.errors import NotFound, ValidationError
from foodlens.services.ai import NutritionAIService
from foodlens.services.clock import AppClock
from foodlens.services.images import ImagePipeline, UploadedFile
from foodlens.services.limits import LimitGate
from foodlens.services.streaks import StreakService
from foodlens.services.subscriptions import SubscriptionService
from foodlens.services.users import UserRepository, require_user
from foodlens.services.water import WaterRepository

logger = logging.getLogger(__name__)

PROGRESS_DAYS = 7
NUMERIC_FIELDS = ("calories", "protein_g", "fat_g", "carbs_g")
EDITABLE_FIELDS = frozenset({"name", "health_score", "meal_type", *NUMERIC_FIELDS})


class FoodRepository(Protocol):
    """Persistence interface for diary entries."""

    def create_entry(self, user_id: UUID, draft: FoodEntryDraft) -> FoodEntry:
        """Store a new entry and return it."""

    def get_entry(self, entry_id: UUID) -> FoodEntry | None:
        """Return an entry by id, if present."""

    def list_entries(
        self,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[FoodEntry]:
        """Return a user's entries in [start, end), newest first."""

    def update_entry(self, entry_id: UUID, changes: dict[str, object]) -> FoodEntry:
        """Apply column changes and return the updated entry."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry."""

    def create_favorite(self, user_id: UUID, entry: FoodEntry) -> FavoriteFood:
        """Save a copy of an entry's name and nutrition as a favorite."""

    def get_favorite(self, favorite_id: UUID) -> FavoriteFood | None:
        """Return a favorite by id, if present."""

    def list_favorites(self, user_id: UUID) -> list[FavoriteFood]:
        """Return a user's favorites, newest first."""

    def delete_favorite(self, favorite_id: UUID) -> None:
        """Delete a favorite."""

    def delete_user_data(self, user_id: UUID) -> None:
        """Delete every entry and favorite of a user."""


@dataclass(frozen=True)
class AnalyzedEntry:
    """A diary entry created from an AI estimate."""

    entry: FoodEntry
    analysis: FoodAnalysis


@dataclass
class FoodDiaryService:
    """Application service for the food diary."""

    repository: FoodRepository
    users: UserRepository
    subscriptions: SubscriptionService
    gate: LimitGate
    pipeline: ImagePipeline
    ai: NutritionAIService
    streaks: StreakService
    water: WaterRepository
    clock: AppClock

    async def analyze_upload(self, user_id: UUID, upload: UploadedFile) -> AnalyzedEntry:
        """Analyze a multipart photo and log it as a diary entry."""
        async with self.gate.metered(user_id, PHOTOS) as context:
            image = await self.pipeline.from_upload(
                upload, is_pro=context.is_pro, profile=ANALYSIS_PROFILE
            )
            result = await self._log_photo(user_id, image)
        self.streaks.record_activity(user_id)
        return result

    async def analyze_inline(self, user_id: UUID, payload: str) -> AnalyzedEntry:
        """Analyze a base64 photo and log it as a diary entry."""
        async with self.gate.metered(user_id, PHOTOS) as context:
            image = await self.pipeline.from_inline(
                payload, is_pro=context.is_pro, profile=ANALYSIS_PROFILE
            )
            result = await self._log_photo(user_id, image)
        self.streaks.record_activity(user_id)
        return result

    async def analyze_description(self, user_id: UUID, description: str) -> AnalyzedEntry:
        """Estimate a described dish and log it without counting a photo."""
        text = description.strip()
        if not text:
            raise ValidationError("Description is required", field="description")
        require_user(self.users, user_id)
        analysis = await self.ai.analyze_description(text)
        entry = self.repository.create_entry(user_id, self._draft(analysis, image=None))
        self.streaks.record_activity(user_id)
        return AnalyzedEntry(entry=entry, analysis=analysis)

    def history(self, user_id: UUID) -> list[FoodEntry]:
        """Return every entry of a user, newest first."""
        require_user(self.users, user_id)
        return self.repository.list_entries(user_id)

    def entries_for_day(self, user_id: UUID, day: date | None = None) -> list[FoodEntry]:
        """Return the entries logged on one local day."""
        start = self.clock.start_of_day(day or self.clock.today())
        return self.repository.list_entries(user_id, start, start + timedelta(days=1))

    def daily_summary(self, user_id: UUID, day: date | None = None) -> DailySummary:
        """Return one day's totals against the user's targets."""
        user = require_user(self.users, user_id)
        target_day = day or self.clock.today()
        entries = self.entries_for_day(user_id, target_day)
        water_ml = self.water.get_amount(user_id, self.clock.date_key(target_day))
        profile = user.profile
        return DailySummary(
            day=target_day,
            calories=sum(entry.calories for entry in entries),
            protein_g=sum(entry.protein_g for entry in entries),
            fat_g=sum(entry.fat_g for entry in entries),
            carbs_g=sum(entry.carbs_g for entry in entries),
            target_calories=profile.daily_calories,
            target_protein_g=profile.protein_g,
            target_fat_g=profile.fat_g,
            target_carbs_g=profile.carbs_g,
            water_ml=water_ml or 0,
            water_target_ml=profile.water_target_ml,
            entries=entries,
        )

    async def update_entry(
        self,
        user_id: UUID,
        entry_id: UUID,
        changes: dict[str, object],
        image: str | None = None,
    ) -> FoodEntry:
        """Edit an owned entry, optionally replacing its photo."""
        self._owned_entry(user_id, entry_id)
        values = _validate_changes(changes)
        if image:
            effective = self.subscriptions.resolve(require_user(self.users, user_id))
            values["image"] = await self.pipeline.from_inline(
                image, is_pro=effective.is_pro, profile=FOOD_PROFILE
            )
        if not values:
            raise ValidationError("Nothing to update")
        return self.repository.update_entry(entry_id, values)

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> None:
        """Delete an owned entry."""
        self._owned_entry(user_id, entry_id)
        self.repository.delete_entry(entry_id)
        logger.info(
            "Deleted food entry",
            extra={"user_id": str(user_id), "entry_id": str(entry_id)},
        )

    async def preview_description(self, user_id: UUID, description: str) -> FoodAnalysis:
        """Estimate a described dish without logging it."""
        text = description.strip()
        if not text:
            raise ValidationError("Description is required", field="description")
        require_user(self.users, user_id)
        return await self.ai.analyze_description(text)

    def weekly_progress(self, user_id: UUID) -> list[DayProgress]:
        """Return calories against target for the last seven days, oldest first."""
        user = require_user(self.users, user_id)
        today = self.clock.today()
        first_day = today - timedelta(days=PROGRESS_DAYS - 1)
        entries = self.repository.list_entries(
            user_id,
            self.clock.start_of_day(first_day),
            self.clock.start_of_day(today + timedelta(days=1)),
        )
        by_day: dict[date, list[FoodEntry]] = {}
        for entry in entries:
            by_day.setdefault(self.clock.local_day(entry.logged_at), []).append(entry)
        progress = []
        for offset in range(PROGRESS_DAYS):
            day = first_day + timedelta(days=offset)
            day_entries = by_day.get(day, [])
            progress.append(
                DayProgress(
                    day=day,
                    calories=sum(entry.calories for entry in day_entries),
                    target_calories=user.profile.daily_calories,
                    entry_count=len(day_entries),
                )
            )
        return progress

    def monthly_active_days(self, user_id: UUID, year: int, month: int) -> list[date]:
        """Return the local days of a month with at least one entry."""
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12", field="month")
        if not 1 <= year < 9999:
            raise ValidationError("year is out of range", field="year")
        require_user(self.users, user_id)
        first_day = date(year, month, 1)
        next_month = date(year + month // 12, month % 12 + 1, 1)
        entries = self.repository.list_entries(
            user_id,
            self.clock.start_of_day(first_day),
            self.clock.start_of_day(next_month),
        )
        return sorted({self.clock.local_day(entry.logged_at) for entry in entries})

    def add_favorite(self, user_id: UUID, entry_id: UUID) -> FavoriteFood:
        """Save one of the user's entries as a favorite dish."""
        entry = self._owned_entry(user_id, entry_id)
        favorite = self.repository.create_favorite(user_id, entry)
        logger.info(
            "Saved favorite food",
            extra={"user_id": str(user_id), "favorite_id": str(favorite.id)},
        )
        return favorite

    def favorites(self, user_id: UUID) -> list[FavoriteFood]:
        """Return the user's favorite dishes."""
        require_user(self.users, user_id)
        return self.repository.list_favorites(user_id)

    def remove_favorite(self, user_id: UUID, favorite_id: UUID) -> None:
        """Delete one of the user's favorites."""
        self._owned_favorite(user_id, favorite_id)
        self.repository.delete_favorite(favorite_id)

    def log_favorite(self, user_id: UUID, favorite_id: UUID) -> FoodEntry:
        """Log a favorite dish to the diary now, without a photo."""
        favorite = self._owned_favorite(user_id, favorite_id)
        now = self.clock.now()
        draft = FoodEntryDraft(
            name=favorite.name,
            calories=favorite.calories,
            protein_g=favorite.protein_g,
            fat_g=favorite.fat_g,
            carbs_g=favorite.carbs_g,
            health_score=favorite.health_score,
            meal_type=meal_type_for_hour(now.hour),
            logged_at=now,
        )
        return self.repository.create_entry(user_id, draft)

    async def _log_photo(self, user_id: UUID, image: StoredImage) -> AnalyzedEntry:
        analysis = await self.ai.analyze_image(image)
        stored = await self.pipeline.recompress(image.data, FOOD_PROFILE)
        entry = self.repository.create_entry(user_id, self._draft(analysis, image=stored))
        logger.info(
            "Logged food photo",
            extra={"user_id": str(user_id), "entry_id": str(entry.id)},
        )
        return AnalyzedEntry(entry=entry, analysis=analysis)

    def _draft(self, analysis: FoodAnalysis, image: StoredImage | None) -> FoodEntryDraft:
        now = self.clock.now()
        return FoodEntryDraft(
            name=analysis.name,
            calories=analysis.calories,
            protein_g=analysis.protein_g,
            fat_g=analysis.fat_g,
            carbs_g=analysis.carbs_g,
            health_score=analysis.health_score,
            meal_type=meal_type_for_hour(now.hour),
            logged_at=now,
            image=image,
        )

    def _owned_entry(self, user_id: UUID, entry_id: UUID) -> FoodEntry:
        entry = self.repository.get_entry(entry_id)
        if entry is None or entry.user_id != user_id:
            raise NotFound("Food entry", entry_id)
        return entry

    def _owned_favorite(self, user_id: UUID, favorite_id: UUID) -> FavoriteFood:
        favorite = self.repository.get_favorite(favorite_id)
        if favorite is None or favorite.user_id != user_id:
            raise NotFound("Favorite food", favorite_id)
        return favorite


def _validate_changes(changes: dict[str, object]) -> dict[str, object]:
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        field = sorted(unknown)[0]
        raise ValidationError(f"Field cannot be edited: {field}", field=field)
    # null means "leave unchanged"
    values = {name: value for name, value in changes.items() if value is not None}
    if "name" in values:
        name = str(values["name"] or "").strip()
        if not name:
            raise ValidationError("Name is required", field="name")
        values["name"] = name
    for name in NUMERIC_FIELDS:
        if name in values:
            values[name] = _number(values[name], name, float)
            if values[name] < 0:
                raise ValidationError(f"{name} cannot be negative", field=name)
    if "health_score" in values:
        values["health_score"] = _number(values["health_score"], "health_score", int)
        if not 0 <= values["health_score"] <= 100:
            raise ValidationError(
                "health_score must be between 0 and 100", field="health_score"
            )
    if "meal_type" in values and values["meal_type"] not in MEAL_TYPES:
        raise ValidationError(
            f"meal_type must be one of {', '.join(MEAL_TYPES)}", field="meal_type"
        )
    return values


def _number(value: object, name: str, kind: type) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number", field=name)
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number", field=name) from exc
