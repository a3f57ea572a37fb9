"""Nutrition assistant chat."""

from dataclasses import dataclass
from uuid import UUID

from foodlens.domain.ai import ChatContext, ChatTurn
from foodlens.domain.food import DailySummary
from foodlens.domain.images import CHAT_PROFILE
from foodlens.domain.usage import MESSAGES
from foodlens.errors import ValidationError
from foodlens.services.ai import NutritionAIService
from foodlens.services.food import FoodDiaryService
from foodlens.services.images import ImagePipeline, UploadedFile
from foodlens.services.limits import LimitGate
from foodlens.services.streaks import StreakService
from foodlens.services.users import UserRepository, require_user

CHAT_ROLES = ("user", "assistant")
PHOTO_QUESTION = "What is in this photo and how does it fit my diet?"


@dataclass(frozen=True)
class DayReview:
    """AI review of a day together with the numbers it was based on."""

    text: str
    summary: DailySummary


@dataclass
class ChatService:
    """Routes chat messages to the assistant under the message limit."""

    users: UserRepository
    gate: LimitGate
    ai: NutritionAIService
    diary: FoodDiaryService
    streaks: StreakService
    pipeline: ImagePipeline

    async def send(
        self, user_id: UUID, message: str, history: list[ChatTurn] | None = None
    ) -> str:
        """Return the assistant's reply to a message."""
        text = message.strip()
        if not text:
            raise ValidationError("Message cannot be empty", field="message")
        _check_history(history or [])
        async with self.gate.metered(user_id, MESSAGES):
            reply = await self.ai.chat(text, self._context(user_id, history or []))
        self.streaks.record_activity(user_id)
        return reply

    async def send_with_image(
        self,
        user_id: UUID,
        message: str | None,
        upload: UploadedFile,
        history: list[ChatTurn] | None = None,
    ) -> str:
        """Return the assistant's reply to a message about a photo."""
        text = (message or "").strip() or PHOTO_QUESTION
        _check_history(history or [])
        async with self.gate.metered(user_id, MESSAGES) as limits:
            image = await self.pipeline.from_upload(
                upload, is_pro=limits.is_pro, profile=CHAT_PROFILE
            )
            reply = await self.ai.chat(
                text, self._context(user_id, history or []), image=image
            )
        self.streaks.record_activity(user_id)
        return reply

    async def daily_summary(self, user_id: UUID) -> DayReview:
        """Review today's diary. Pro only."""
        self.gate.require_pro(user_id)
        summary = self.diary.daily_summary(user_id)
        text = await self.ai.daily_summary(self._context(user_id, [], summary.entries))
        return DayReview(text=text, summary=summary)

    def _context(self, user_id, history, entries=None) -> ChatContext:
        user = require_user(self.users, user_id)
        if entries is None:
            entries = self.diary.entries_for_day(user_id)
        return ChatContext(
            user_name=user.name,
            profile=user.profile,
            today_entries=entries,
            history=history,
        )


def _check_history(history: list[ChatTurn]) -> None:
    for turn in history:
        if turn.role not in CHAT_ROLES:
            raise ValidationError(f"Unknown chat role: {turn.role}", field="history")
