"""Upload, download, inline view and delete of chat attachments."""

import logging

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.audit import AuditAction, create_audit_log
from chatfiles.core.config import settings
from chatfiles.core.exceptions import NotFoundError, UnsupportedOperationError, ValidationError
from chatfiles.core.files.access import (
    FileCatalog,
    raise_for_outcome,
    resolve_ownership,
    resolve_room_access,
)
from chatfiles.core.files.limits import enforce_size_limit
from chatfiles.core.files.models import File
from chatfiles.core.files.naming import (
    build_storage_key,
    generate_filename,
    is_previewable,
    validate_upload,
)
from chatfiles.core.storage import DeleteResult, ObjectStore

logger = logging.getLogger(__name__)


def _upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, 2)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


class FileAccessService:
    """
    Orchestrates validation, the object store and the catalog.

    Every call makes at most one attempt against the store; failures surface
    to the caller except store deletes, which are best-effort.
    """

    def __init__(
        self,
        session: AsyncSession,
        store: ObjectStore,
        *,
        url_ttl_seconds: int | None = None,
        max_upload_bytes: int | None = None,
    ):
        self.session = session
        self.store = store
        self.catalog = FileCatalog(session)
        self.url_ttl_seconds = url_ttl_seconds or settings.signed_url_ttl_seconds
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_bytes

    async def upload(self, uploads: list[UploadFile], owner_id: int) -> File:
        """
        Validate a single uploaded file, store it, then record it in the catalog.

        Store-then-catalog: a failing catalog write leaves an orphaned object
        (logged) rather than a row pointing at nothing.
        """
        if not uploads:
            raise ValidationError("No file selected", reason="no_file", field="file")
        if len(uploads) > 1:
            raise ValidationError(
                "Only one file can be uploaded at a time", reason="too_many_files", field="file"
            )
        upload = uploads[0]

        content_type = (upload.content_type or "").lower()
        validated = validate_upload(upload.filename, content_type)
        size = _upload_size(upload)
        enforce_size_limit(size, content_type, self.max_upload_bytes)

        filename = generate_filename(validated.extension)
        key = build_storage_key(filename, self.store.key_prefix)

        await upload.seek(0)
        await self.store.put(key, upload.file, content_type)

        file = File(
            filename=filename,
            original_filename=validated.original_filename,
            content_type=content_type,
            file_size=size,
            owner_id=owner_id,
            storage_key=key,
            url=self.store.public_url(key),
        )
        try:
            self.session.add(file)
            await self.session.flush()
            await self.session.refresh(file)
        except Exception:
            logger.error("Catalog write failed after storing %s; object is orphaned", key)
            raise

        await create_audit_log(
            session=self.session,
            action=AuditAction.UPLOAD_FILE,
            entity_type="File",
            entity_id=file.id,
            user_id=owner_id,
            entity_identifier=key,
            new_values={
                "filename": filename,
                "original_filename": validated.original_filename,
                "content_type": content_type,
                "file_size": size,
            },
        )
        return file

    async def _readable_file(self, requester_id: int, filename: str) -> File:
        if not filename or not filename.strip():
            raise ValidationError("Invalid file name", reason="invalid_filename")
        outcome = await resolve_room_access(self.catalog, requester_id, filename)
        return raise_for_outcome(outcome)

    async def download_url(self, requester_id: int, filename: str) -> str:
        """Short-lived URL that forces a download under the original filename."""
        file = await self._readable_file(requester_id, filename)
        return await self.store.presign_get(
            file.storage_key,
            self.url_ttl_seconds,
            download_name=file.original_filename,
        )

    async def view_url(self, requester_id: int, filename: str) -> str:
        """Short-lived URL for inline rendering; only images and PDFs qualify."""
        file = await self._readable_file(requester_id, filename)
        if not is_previewable(file.content_type):
            raise UnsupportedOperationError(
                "Preview is not supported for this file type", reason="preview_unsupported"
            )
        return await self.store.presign_get(file.storage_key, self.url_ttl_seconds)

    async def delete(self, requester_id: int, file_id: int) -> DeleteResult:
        """
        Owner-only delete. The stored object is removed best-effort; the catalog
        row is removed regardless and any leftover object is logged.
        """
        outcome = await resolve_ownership(self.catalog, requester_id, file_id)
        file = raise_for_outcome(outcome, forbidden_message="Not allowed to delete this file")
        key = file.storage_key

        result = await self.store.delete_quietly(key)

        if not await self.catalog.remove(file_id):
            raise NotFoundError("File", file_id, reason="file_not_found")

        await create_audit_log(
            session=self.session,
            action=AuditAction.DELETE_FILE,
            entity_type="File",
            entity_id=file_id,
            user_id=requester_id,
            entity_identifier=key,
            new_values={"store_deleted": result.deleted},
        )
        if not result.deleted:
            logger.warning(
                "File %s removed from catalog but object %s is still stored: %s",
                file_id,
                key,
                result.error,
            )
            await create_audit_log(
                session=self.session,
                action=AuditAction.STORE_DIVERGENCE,
                entity_type="File",
                entity_id=file_id,
                user_id=requester_id,
                entity_identifier=key,
                comment=result.error,
            )
        return result
