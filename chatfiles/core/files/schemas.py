"""Pydantic schemas for files."""

from datetime import datetime

from pydantic import Field

from chatfiles.core.files.models import File
from chatfiles.shared.schemas import BaseSchema


class FileResponse(BaseSchema):
    """View-safe projection of a stored file. Never exposes the storage key."""

    id: int
    filename: str
    original_filename: str = Field(alias="originalFilename")
    mime_type: str = Field(alias="mimeType")
    size: int
    uploaded_at: datetime = Field(alias="uploadedAt")
    url: str

    @classmethod
    def from_file(cls, file: File) -> "FileResponse":
        return cls(
            id=file.id,
            filename=file.filename,
            original_filename=file.original_filename,
            mime_type=file.content_type,
            size=file.file_size,
            uploaded_at=file.created_at,
            url=file.url,
        )


class FileDeleteResponse(BaseSchema):
    id: int
    # False when the object could not be removed from storage; the catalog row is gone either way.
    store_deleted: bool = Field(alias="storeDeleted")
