from chatfiles.core.storage.base import DeleteResult, ObjectStore, attachment_disposition
from chatfiles.core.storage.dependencies import UnconfiguredObjectStore, get_object_store
from chatfiles.core.storage.s3 import S3ObjectStore

__all__ = [
    "DeleteResult",
    "ObjectStore",
    "S3ObjectStore",
    "UnconfiguredObjectStore",
    "attachment_disposition",
    "get_object_store",
]
