"""Error taxonomy shared by services and the HTTP layer.

Every failure a caller can see is one of these classes. Each carries a stable
``kind``, a human-readable message, the HTTP status the API answers with, and
optional structured details.
"""

from typing import Any


class FoodLensError(Exception):
    """Base class for all expected application failures."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Return the structured body rendered by the API."""
        return {
            "success": False,
            "error": {
                "kind": self.kind,
                "message": self.message,
                "details": self.details,
            },
        }


class NotFound(FoodLensError):
    """A user or owned resource does not exist."""

    kind = "not_found"
    status_code = 404

    def __init__(self, resource: str, identifier: object) -> None:
        super().__init__(
            f"{resource} not found",
            details={"resource": resource, "id": str(identifier)},
        )


class ValidationError(FoodLensError):
    """Input has the wrong shape or value."""

    kind = "validation_error"
    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)


class LimitReached(FoodLensError):
    """The daily usage ceiling for an action has been hit."""

    kind = "limit_reached"
    status_code = 403

    def __init__(self, limit_type: str, current: int, maximum: int, is_pro: bool) -> None:
        upsell = "Try again tomorrow." if is_pro else "Upgrade to Pro for more."
        super().__init__(
            f"Daily {limit_type} limit reached ({maximum} per day). {upsell}",
            details={
                "limitReached": True,
                "limitType": limit_type,
                "current": current,
                "max": maximum,
                "isPro": is_pro,
            },
        )
        self.limit_type = limit_type
        self.current = current
        self.maximum = maximum
        self.is_pro = is_pro


class RequiresPro(FoodLensError):
    """The feature is only available on the pro tier."""

    kind = "requires_pro"
    status_code = 403

    def __init__(self, message: str = "This feature is available to Pro users only") -> None:
        super().__init__(message, details={"requiresPro": True})


class PayloadTooLarge(FoodLensError):
    """An upload exceeds the raw size ceiling for its tier."""

    kind = "payload_too_large"
    status_code = 413

    def __init__(self, limit: str, file_size: str, upgrade: bool = True) -> None:
        message = f"File is larger than {limit}."
        if upgrade:
            message += " Upgrade to Pro to upload bigger files."
        super().__init__(
            message,
            details={"limit": limit, "fileSize": file_size},
        )
        self.limit = limit
        self.file_size = file_size


class UpstreamUnavailable(FoodLensError):
    """The AI provider failed transiently and retries are exhausted."""

    kind = "upstream_unavailable"
    status_code = 503

    def __init__(self, message: str = "AI service is temporarily unavailable") -> None:
        super().__init__(message)


class ProcessingFailure(FoodLensError):
    """The image pipeline could not process an upload."""

    kind = "processing_failure"
    status_code = 500

    def __init__(self, message: str = "Image processing failed") -> None:
        super().__init__(message)
