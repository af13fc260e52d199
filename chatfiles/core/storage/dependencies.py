import logging
from functools import lru_cache

from chatfiles.core.config import settings
from chatfiles.core.exceptions import StoreError
from chatfiles.core.storage.base import DeleteResult, ObjectStore
from chatfiles.core.storage.s3 import S3ObjectStore

logger = logging.getLogger(__name__)


class UnconfiguredObjectStore(ObjectStore):
    """
    Stand-in used when no bucket is configured.

    Key checks still apply; every backend call fails with
    `store_not_configured`, so authorization and validation answer first.
    Deletes raise as well, so catalog rows stay while objects are unreachable.
    """

    @staticmethod
    def _not_configured() -> StoreError:
        return StoreError("File storage is not configured", reason="store_not_configured")

    async def delete_quietly(self, key: str) -> DeleteResult:
        raise self._not_configured()

    async def _put(self, key, body, content_type):
        raise self._not_configured()

    async def _presign_get(self, key, expires_in, disposition):
        raise self._not_configured()

    async def _delete(self, key):
        raise self._not_configured()

    def _public_url(self, key):
        raise self._not_configured()


@lru_cache
def _unconfigured_store() -> UnconfiguredObjectStore:
    logger.warning("S3 is not configured; file storage calls will fail")
    return UnconfiguredObjectStore(settings.storage_key_prefix)


@lru_cache
def _default_store() -> S3ObjectStore:
    return S3ObjectStore(
        bucket=settings.s3_bucket,
        key_prefix=settings.storage_key_prefix,
        endpoint_url=settings.s3_endpoint_url,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        region=settings.s3_region,
        public_base_url=settings.s3_public_base_url,
    )


def get_object_store() -> ObjectStore:
    """Dependency returning the configured object store."""
    if not settings.use_s3:
        return _unconfigured_store()
    return _default_store()
