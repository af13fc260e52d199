from chatfiles.core.database.session import async_session, engine, get_db
from chatfiles.core.database.base import Base, BaseModel, BigIntPK, CreatedAtMixin, IdMixin

__all__ = [
    "async_session",
    "engine",
    "get_db",
    "Base",
    "BaseModel",
    "BigIntPK",
    "CreatedAtMixin",
    "IdMixin",
]
