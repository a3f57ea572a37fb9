"""Image value objects."""

import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class StoredImage:
    """Compressed image bytes kept on the owning record."""

    data: bytes
    content_type: str

    def to_data_url(self) -> str:
        """Return the image as a self-describing data URL."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass(frozen=True)
class CompressionProfile:
    """Bounding box and JPEG quality for one image context."""

    name: str
    max_edge: int
    quality: int


ANALYSIS_PROFILE = CompressionProfile("analysis", max_edge=1920, quality=85)
FOOD_PROFILE = CompressionProfile("food", max_edge=800, quality=80)
RECIPE_PROFILE = CompressionProfile("recipe", max_edge=600, quality=78)
AVATAR_PROFILE = CompressionProfile("avatar", max_edge=400, quality=75)
CHAT_PROFILE = CompressionProfile("chat", max_edge=1024, quality=80)


def image_data_url(image: StoredImage | None) -> str | None:
    """Serialize an optional image for API responses."""
    return image.to_data_url() if image else None
