"""Daily usage bucket and the per-tier limits table."""

from dataclasses import dataclass, replace

PHOTOS = "photos"
MESSAGES = "messages"
RECIPES = "recipes"
USAGE_KINDS = (PHOTOS, MESSAGES, RECIPES)

LIMITS: dict[str, dict[str, int]] = {
    "free": {PHOTOS: 2, MESSAGES: 10, RECIPES: 1},
    "pro": {PHOTOS: 50, MESSAGES: 100, RECIPES: 30},
}


@dataclass(frozen=True)
class UsageBucket:
    """Counts of metered actions for a single calendar day."""

    date: str | None = None
    photos_count: int = 0
    messages_count: int = 0
    recipes_count: int = 0

    def count(self, kind: str) -> int:
        """Return the counter for a usage kind."""
        return getattr(self, f"{kind}_count")

    def incremented(self, kind: str) -> "UsageBucket":
        """Return a copy with one counter bumped by one."""
        return replace(self, **{f"{kind}_count": self.count(kind) + 1})
