"""Per-category and absolute upload size limits."""

from chatfiles.core.exceptions import PayloadTooLargeError, ValidationError
from chatfiles.core.files.naming import category_label, file_category

MB = 1024 * 1024

FILE_SIZE_LIMITS = {
    "image": 10 * MB,
    "video": 50 * MB,
    "audio": 20 * MB,
    "document": 20 * MB,
}
MAX_UPLOAD_BYTES = 50 * MB


def size_limit_for(content_type: str | None, max_upload_bytes: int = MAX_UPLOAD_BYTES) -> int:
    """Effective limit: the category limit or the absolute ceiling, whichever is smaller."""
    category = file_category(content_type)
    limit = FILE_SIZE_LIMITS.get(category, FILE_SIZE_LIMITS["document"])
    return min(limit, max_upload_bytes)


def enforce_size_limit(
    size: int, content_type: str | None, max_upload_bytes: int = MAX_UPLOAD_BYTES
) -> None:
    if size > max_upload_bytes:
        raise PayloadTooLargeError(
            f"File size cannot exceed {max_upload_bytes // MB}MB", field="file"
        )

    limit = size_limit_for(content_type, max_upload_bytes)
    if size > limit:
        raise ValidationError(
            f"{category_label(content_type)} files cannot exceed {limit // MB}MB",
            reason="file_too_large",
            field="file",
        )
