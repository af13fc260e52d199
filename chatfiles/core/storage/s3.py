"""S3 (or S3-compatible) object store backed by aioboto3."""

import logging
from typing import BinaryIO
from urllib.parse import quote

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from chatfiles.core.exceptions import StoreError
from chatfiles.core.storage.base import ObjectStore

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


class S3ObjectStore(ObjectStore):
    def __init__(
        self,
        bucket: str,
        key_prefix: str,
        *,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region: str | None = None,
        public_base_url: str | None = None,
        session: aioboto3.Session | None = None,
    ):
        super().__init__(key_prefix)
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.access_key = access_key
        self.secret_key = secret_key
        self.region = region
        self.public_base_url = public_base_url
        self._session = session or aioboto3.Session()

    def _client(self):
        return self._session.client(
            "s3",
            endpoint_url=self.endpoint_url,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name=self.region,
        )

    async def _put(self, key: str, body: BinaryIO | bytes, content_type: str) -> None:
        try:
            async with self._client() as s3:
                await s3.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("put_object failed for %s: %s", key, exc)
            raise StoreError("Failed to store file") from exc
        logger.info("Stored object %s", key)

    async def _presign_get(self, key: str, expires_in: int, disposition: str | None) -> str:
        params = {"Bucket": self.bucket, "Key": key}
        if disposition:
            params["ResponseContentDisposition"] = disposition
        try:
            async with self._client() as s3:
                return await s3.generate_presigned_url(
                    "get_object", Params=params, ExpiresIn=expires_in
                )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Presigning %s failed: %s", key, exc)
            raise StoreError("Failed to issue file URL") from exc

    async def _delete(self, key: str) -> None:
        try:
            async with self._client() as s3:
                await s3.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                return
            raise StoreError("Failed to delete file") from exc
        except BotoCoreError as exc:
            raise StoreError("Failed to delete file") from exc

    def _public_url(self, key: str) -> str:
        path = quote(key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{path}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{path}"
