"""
Filename canonicalisation, type/extension validation and storage key generation.

Generated names are `<epoch millis>_<16 hex chars><ext>`. Uniqueness is
probabilistic (64 random bits per millisecond); keys are not checked against
the store, the unique `files.filename` column is the only backstop.
"""

import posixpath
import secrets
import time
from dataclasses import dataclass

from chatfiles.core.exceptions import ValidationError

ALLOWED_TYPES: dict[str, tuple[str, ...]] = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/gif": (".gif",),
    "image/webp": (".webp",),
    "video/mp4": (".mp4",),
    "video/webm": (".webm",),
    "video/quicktime": (".mov",),
    "audio/mpeg": (".mp3",),
    "audio/wav": (".wav",),
    "audio/ogg": (".ogg",),
    "application/pdf": (".pdf",),
    "application/msword": (".doc",),
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (".docx",),
}
ALLOWED_EXTENSIONS = frozenset(ext for exts in ALLOWED_TYPES.values() for ext in exts)

PREVIEWABLE_TYPES = frozenset(
    [t for t in ALLOWED_TYPES if t.startswith("image/")] + ["application/pdf"]
)

MAX_FILENAME_BYTES = 255

_CATEGORY_BY_MAJOR = {
    "image": "image",
    "video": "video",
    "audio": "audio",
    "application": "document",
}
_CATEGORY_LABELS = {
    "image": "Image",
    "video": "Video",
    "audio": "Audio",
    "document": "Document",
    "file": "File",
}


@dataclass(frozen=True)
class ValidatedName:
    original_filename: str
    extension: str
    category: str


def file_category(content_type: str | None) -> str:
    """Broad category of a content type: image, video, audio, document or file."""
    major = (content_type or "").split("/", 1)[0].strip().lower()
    return _CATEGORY_BY_MAJOR.get(major, "file")


def category_label(content_type: str | None) -> str:
    return _CATEGORY_LABELS[file_category(content_type)]


def is_previewable(content_type: str | None) -> bool:
    return (content_type or "").lower() in PREVIEWABLE_TYPES


def _is_control(ch: str) -> bool:
    return ch < " " or "\x7f" <= ch <= "\x9f"


def _invalid_name() -> ValidationError:
    return ValidationError("Invalid file name", reason="invalid_filename", field="file")


def canonical_filename(raw: str | bytes | None) -> str:
    """
    Return the client's filename as proper UTF-8 text without directory parts.

    Bytes must be valid UTF-8. Text that is UTF-8 mis-read as latin-1
    ("rÃ©sumÃ©.pdf") is repaired; any other text is kept as received.

    The multipart parser hands over undecodable names as latin-1 text, so
    over HTTP invalid bytes only fail when they land on a control character
    (C0, DEL or C1). Other invalid bytes survive as their latin-1 letters,
    e.g. a lone 0xFF byte arrives as "ÿ".
    """
    if raw is None:
        raise _invalid_name()

    if isinstance(raw, bytes):
        try:
            name = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise _invalid_name() from None
    else:
        name = raw
        try:
            repaired = name.encode("latin-1").decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            repaired = name
        name = repaired

    name = posixpath.basename(name.replace("\\", "/")).strip()
    if not name or name in (".", "..") or any(_is_control(ch) for ch in name):
        raise _invalid_name()
    return name


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot; empty for dotfiles and bare names."""
    return posixpath.splitext(filename)[1].lower()


def validate_upload(raw_filename: str | bytes | None, content_type: str | None) -> ValidatedName:
    """
    Check the declared content type and the filename against the allow-list.

    The extension must match the *declared* type, so `payload.exe` sent as
    `image/png` is rejected even though `image/png` itself is allowed.
    """
    content_type = (content_type or "").lower()
    label = category_label(content_type)

    allowed = ALLOWED_TYPES.get(content_type)
    if allowed is None:
        raise ValidationError(
            f"Unsupported {label.lower()} format", reason="unsupported_type", field="file"
        )

    original = canonical_filename(raw_filename)
    if len(original.encode("utf-8")) > MAX_FILENAME_BYTES:
        raise ValidationError("File name is too long", reason="filename_too_long", field="file")

    ext = file_extension(original)
    if ext not in allowed:
        raise ValidationError(
            f"{label} file extension is not valid", reason="extension_mismatch", field="file"
        )

    return ValidatedName(
        original_filename=original,
        extension=ext,
        category=file_category(content_type),
    )


def generate_filename(extension: str) -> str:
    ext = extension.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise _invalid_name()
    timestamp = time.time_ns() // 1_000_000
    return f"{timestamp}_{secrets.token_hex(8)}{ext}"


def build_storage_key(filename: str, prefix: str) -> str:
    return f"{prefix}{filename}"
