"""Upload service: validates and stores audio and cover binaries on disk."""

import logging
import re
import secrets
import time
from pathlib import Path

from audiobook.config import get_settings
from audiobook.exceptions import NotFoundError, ValidationError
from audiobook.models.enums import UploadKind

logger = logging.getLogger(__name__)

AUDIO_MIME_PREFIX = "audio/"
AUDIO_MIME_TYPES = {
    "video/mpeg",
    "video/mp4",
    "video/x-m4v",
    "video/quicktime",
    "application/octet-stream",
    "application/x-mpegurl",
    "application/vnd.apple.mpegurl",
}
AUDIO_EXTENSIONS = {".mp3", ".m4a", ".wav", ".aac", ".ogg", ".flac", ".mpeg", ".mp4", ".mov", ".m4v"}
IMAGE_MIME_PREFIX = "image/"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def is_allowed(kind: UploadKind, content_type: str | None, filename: str) -> bool:
    """Check a file's MIME type / extension against the allow-list for its kind.

    Audio is accepted on either a matching MIME type or a known extension;
    covers need an ``image/*`` MIME type.
    """
    mime = (content_type or "").lower()
    if kind == UploadKind.AUDIO:
        extension = Path(filename).suffix.lower()
        return (
            mime.startswith(AUDIO_MIME_PREFIX)
            or mime in AUDIO_MIME_TYPES
            or extension in AUDIO_EXTENSIONS
        )
    return mime.startswith(IMAGE_MIME_PREFIX)


def allowed_types_message(kind: UploadKind) -> str:
    if kind == UploadKind.AUDIO:
        mimes = ", ".join(["audio/*", *sorted(AUDIO_MIME_TYPES)])
        extensions = ", ".join(sorted(AUDIO_EXTENSIONS))
        return f"Allowed types: {mimes}; allowed extensions: {extensions}"
    return "Allowed types: image/*"


def generate_filename(original_name: str) -> str:
    """``<epoch-ms>-<random hex>-<sanitized base><ext>``."""
    path = Path(original_name or "upload")
    extension = _UNSAFE_CHARS.sub("", path.suffix.lower())
    base = re.sub(r"\s+", "-", path.stem.strip())
    base = _UNSAFE_CHARS.sub("", base).strip(".") or "file"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}-{base[:100]}{extension}"


class UploadService:
    """Stores uploads under ``<root>/audio`` and ``<root>/covers``.

    Returned references are relative (``audio/<name>``) and are what the
    catalog stores on books and chapters.
    """

    def __init__(self, root: str | Path | None = None):
        self.settings = get_settings()
        self.root = Path(root or self.settings.upload_dir)

    def max_size(self, kind: UploadKind) -> int:
        megabytes = (
            self.settings.max_audio_upload_mb
            if kind == UploadKind.AUDIO
            else self.settings.max_cover_upload_mb
        )
        return megabytes * 1024 * 1024

    def check_upload(
        self,
        kind: UploadKind,
        original_name: str,
        content_type: str | None,
        size: int | None,
    ) -> None:
        """Reject a disallowed type or size. ``size`` is None when not yet known."""
        if not is_allowed(kind, content_type, original_name):
            logger.warning(
                f"Rejected {kind.value} upload '{original_name}' with type {content_type}"
            )
            raise ValidationError(
                f"File type not allowed ({content_type}). {allowed_types_message(kind)}"
            )
        if size is None:
            return
        if size == 0:
            raise ValidationError("Uploaded file is empty")
        limit = self.max_size(kind)
        if size > limit:
            logger.warning(f"Rejected {kind.value} upload '{original_name}' of {size} bytes")
            raise ValidationError(f"File too large. Maximum size is {limit // (1024 * 1024)}MB.")

    def store_upload(
        self,
        kind: UploadKind,
        data: bytes,
        original_name: str,
        content_type: str | None,
    ) -> str:
        """Validate and write an upload, returning its relative reference."""
        self.check_upload(kind, original_name, content_type, len(data))

        directory = self.root / kind.directory
        directory.mkdir(parents=True, exist_ok=True)

        filename = generate_filename(original_name)
        (directory / filename).write_bytes(data)

        reference = f"{kind.directory}/{filename}"
        logger.info(f"Stored {kind.value} upload '{original_name}' as {reference} ({len(data)} bytes)")
        return reference

    def resolve_file(self, reference: str) -> Path:
        """Map a stored reference to a file inside the upload root."""
        root = self.root.resolve()
        path = (root / reference).resolve()
        if not path.is_relative_to(root) or not path.is_file():
            raise NotFoundError("File not found")
        return path


def get_upload_service() -> UploadService:
    """Get an upload service rooted at the configured upload directory."""
    return UploadService()
