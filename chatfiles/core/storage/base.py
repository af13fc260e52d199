"""Object store abstraction: put, presigned GET and idempotent delete under a safe prefix."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO
from urllib.parse import quote

from chatfiles.core.exceptions import UnsafeStorageKeyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a best-effort delete. Callers decide whether to look at it."""

    key: str
    deleted: bool
    error: str | None = None


def attachment_disposition(filename: str) -> str:
    """Content-Disposition forcing a download under the percent-encoded original name."""
    return f'attachment; filename="{quote(filename, safe="")}"'


class ObjectStore(ABC):
    """
    Base class for object stores.

    Public methods validate the key against the safe prefix before the
    backend is touched; subclasses implement the underscored hooks only.
    """

    def __init__(self, key_prefix: str):
        self.key_prefix = key_prefix

    def is_safe_key(self, key: object) -> bool:
        if not isinstance(key, str) or not key.startswith(self.key_prefix):
            return False
        if "\\" in key or "\x00" in key:
            return False
        segments = key[len(self.key_prefix):].split("/")
        return all(segment not in ("", ".", "..") for segment in segments)

    def ensure_safe_key(self, key: object) -> str:
        if not self.is_safe_key(key):
            logger.warning("Rejected unsafe storage key %r", key)
            raise UnsafeStorageKeyError(key)
        return key

    async def put(self, key: str, body: BinaryIO | bytes, content_type: str) -> None:
        """Store the object in a single write. Raises StoreError on failure."""
        self.ensure_safe_key(key)
        await self._put(key, body, content_type)

    async def presign_get(
        self, key: str, expires_in: int, download_name: str | None = None
    ) -> str:
        """
        Time-limited GET URL. With `download_name` the response is forced to an
        attachment download under that name; without it the browser may render inline.
        """
        self.ensure_safe_key(key)
        disposition = attachment_disposition(download_name) if download_name else None
        return await self._presign_get(key, expires_in, disposition)

    async def delete(self, key: str) -> None:
        """Delete the object. An already-missing object is not an error."""
        self.ensure_safe_key(key)
        await self._delete(key)

    async def delete_quietly(self, key: str) -> DeleteResult:
        """Best-effort delete: never raises, failures are logged and returned."""
        try:
            await self.delete(key)
        except Exception as exc:
            logger.warning("Best-effort delete of %r failed: %s", key, exc)
            return DeleteResult(key=key, deleted=False, error=str(exc))
        logger.info("Deleted object %s", key)
        return DeleteResult(key=key, deleted=True)

    def public_url(self, key: str) -> str:
        self.ensure_safe_key(key)
        return self._public_url(key)

    @abstractmethod
    async def _put(self, key: str, body: BinaryIO | bytes, content_type: str) -> None: ...

    @abstractmethod
    async def _presign_get(self, key: str, expires_in: int, disposition: str | None) -> str: ...

    @abstractmethod
    async def _delete(self, key: str) -> None: ...

    @abstractmethod
    def _public_url(self, key: str) -> str: ...
