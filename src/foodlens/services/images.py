"""Image ingestion: size gate, orientation, downscale and recompression."""

import asyncio
import base64
import binascii
import io
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from PIL import Image, ImageOps

from foodlens.domain.images import CompressionProfile, StoredImage
from foodlens.errors import PayloadTooLarge, ProcessingFailure, ValidationError

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024
FREE_UPLOAD_LIMIT_MB = 25
MAX_UPLOAD_MB = 50
OUTPUT_CONTENT_TYPE = "image/jpeg"
ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/heic",
        "image/heif",
    }
)
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".heif")
_CHUNK_SIZE = MEGABYTE


class UploadedFile(Protocol):
    """Multipart upload as exposed by the web framework."""

    filename: str | None
    content_type: str | None
    size: int | None

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes."""


def format_megabytes(size: int) -> str:
    """Return a byte count as e.g. ``30.00MB``."""
    return f"{size / MEGABYTE:.2f}MB"


def check_upload_size(
    size: int,
    *,
    is_pro: bool,
    limit_mb: int = FREE_UPLOAD_LIMIT_MB,
    max_mb: int = MAX_UPLOAD_MB,
) -> None:
    """Reject uploads above the ceiling of the caller's tier."""
    ceiling = upload_ceiling_mb(is_pro=is_pro, limit_mb=limit_mb, max_mb=max_mb)
    if size > ceiling * MEGABYTE:
        raise PayloadTooLarge(
            limit=f"{ceiling}MB", file_size=format_megabytes(size), upgrade=not is_pro
        )


def upload_ceiling_mb(*, is_pro: bool, limit_mb: int, max_mb: int) -> int:
    """Pro users get the hard cap, everyone else the free limit."""
    return max_mb if is_pro else min(limit_mb, max_mb)


def is_allowed_upload(content_type: str | None, filename: str | None) -> bool:
    """Return True for image MIME types or image file extensions."""
    if content_type and content_type.lower() in ALLOWED_CONTENT_TYPES:
        return True
    return bool(filename) and filename.lower().endswith(ALLOWED_EXTENSIONS)


def decode_inline_image(payload: str) -> bytes:
    """Decode a bare base64 string or a ``data:`` URL."""
    encoded = payload.split("base64,", 1)[1] if "base64," in payload else payload
    encoded = "".join(encoded.split())
    if not encoded:
        raise ValidationError("Image is required", field="image")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Image is not valid base64", field="image") from exc


def compress_image(data: bytes, profile: CompressionProfile) -> StoredImage:
    """Normalize orientation, fit inside the profile box and re-encode as JPEG."""
    with Image.open(io.BytesIO(data)) as source:
        image = ImageOps.exif_transpose(source)
        if image.mode != "RGB":
            image = _flatten(image)
        if max(image.size) > profile.max_edge:
            image.thumbnail(
                (profile.max_edge, profile.max_edge), Image.Resampling.LANCZOS
            )
        buffer = io.BytesIO()
        image.save(
            buffer,
            format="JPEG",
            quality=profile.quality,
            optimize=True,
            progressive=True,
        )
    compressed = buffer.getvalue()
    logger.debug(
        "Compressed image",
        extra={
            "profile": profile.name,
            "original_bytes": len(data),
            "compressed_bytes": len(compressed),
        },
    )
    return StoredImage(data=compressed, content_type=OUTPUT_CONTENT_TYPE)


def _flatten(image: Image.Image) -> Image.Image:
    """Convert to RGB, compositing transparency onto white."""
    if image.mode in ("RGBA", "LA", "P"):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Failed to remove temporary upload", extra={"path": str(path)})


@dataclass
class ImagePipeline:
    """Turns raw uploads into compressed images ready to persist."""

    upload_dir: Path
    free_limit_mb: int = FREE_UPLOAD_LIMIT_MB
    max_upload_mb: int = MAX_UPLOAD_MB

    async def from_bytes(
        self, data: bytes, *, is_pro: bool, profile: CompressionProfile
    ) -> StoredImage:
        """Gate and compress raw image bytes."""
        check_upload_size(
            len(data),
            is_pro=is_pro,
            limit_mb=self.free_limit_mb,
            max_mb=self.max_upload_mb,
        )
        return await self.recompress(data, profile)

    async def from_inline(
        self, payload: str, *, is_pro: bool, profile: CompressionProfile
    ) -> StoredImage:
        """Gate and compress an inline base64 image."""
        data = decode_inline_image(payload)
        return await self.from_bytes(data, is_pro=is_pro, profile=profile)

    async def from_upload(
        self, upload: UploadedFile, *, is_pro: bool, profile: CompressionProfile
    ) -> StoredImage:
        """Spool a multipart upload to disk, gate it and compress it."""
        if not is_allowed_upload(upload.content_type, upload.filename):
            raise ValidationError(
                "Only images are allowed (JPG, PNG, GIF, WEBP, HEIC)", field="image"
            )
        ceiling = upload_ceiling_mb(
            is_pro=is_pro, limit_mb=self.free_limit_mb, max_mb=self.max_upload_mb
        )
        path = await self._spool(upload, ceiling_mb=ceiling, is_pro=is_pro)
        try:
            data = await asyncio.to_thread(path.read_bytes)
            return await self.recompress(data, profile)
        except OSError as exc:
            logger.exception("Failed to read spooled upload", extra={"path": str(path)})
            raise ProcessingFailure() from exc
        finally:
            _remove_quietly(path)

    async def recompress(self, data: bytes, profile: CompressionProfile) -> StoredImage:
        """Compress bytes in a worker thread."""
        try:
            return await asyncio.to_thread(compress_image, data, profile)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            logger.exception("Image compression failed", extra={"profile": profile.name})
            raise ProcessingFailure() from exc

    async def _spool(self, upload: UploadedFile, *, ceiling_mb: int, is_pro: bool) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        suffix = Path(upload.filename or "").suffix.lower()
        handle = tempfile.NamedTemporaryFile(
            dir=self.upload_dir, prefix="upload-", suffix=suffix, delete=False
        )
        path = Path(handle.name)
        max_bytes = ceiling_mb * MEGABYTE
        written = 0
        try:
            with handle:
                while chunk := await upload.read(_CHUNK_SIZE):
                    written += len(chunk)
                    if written > max_bytes:
                        break
                    handle.write(chunk)
        except OSError as exc:
            logger.exception("Failed to spool upload", extra={"path": str(path)})
            _remove_quietly(path)
            raise ProcessingFailure() from exc
        if written > max_bytes:
            _remove_quietly(path)
            raise PayloadTooLarge(
                limit=f"{ceiling_mb}MB",
                file_size=format_megabytes(max(upload.size or 0, written)),
                upgrade=not is_pro,
            )
        return path
