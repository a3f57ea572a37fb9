"""Column conversions shared by the Supabase repositories."""

from datetime import datetime

from foodlens.domain.images import StoredImage

BYTEA_PREFIX = "\\x"


def encode_bytea(data: bytes) -> str:
    """Return bytes in Postgres hex ``bytea`` input format."""
    return BYTEA_PREFIX + data.hex()


def decode_bytea(value: str) -> bytes:
    """Parse a hex ``bytea`` value as returned by PostgREST."""
    if value.startswith(BYTEA_PREFIX):
        value = value[len(BYTEA_PREFIX) :]
    return bytes.fromhex(value)


def image_columns(image: StoredImage | None, prefix: str = "image") -> dict[str, object]:
    """Return the two columns that hold an optional image."""
    if image is None:
        return {prefix: None, f"{prefix}_content_type": None}
    return {
        prefix: encode_bytea(image.data),
        f"{prefix}_content_type": image.content_type,
    }


def parse_image(row: dict[str, object], prefix: str = "image") -> StoredImage | None:
    """Return the image stored in a row, if any."""
    raw = row.get(prefix)
    if not raw:
        return None
    content_type = row.get(f"{prefix}_content_type") or "image/jpeg"
    return StoredImage(data=decode_bytea(str(raw)), content_type=str(content_type))


def parse_timestamp(value: object) -> datetime | None:
    """Parse an optional ISO timestamp column."""
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def format_timestamp(value: datetime | None) -> str | None:
    """Format an optional timestamp for insertion."""
    return value.isoformat() if value else None
