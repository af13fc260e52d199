"""Catalog record for a binary attachment stored in the object store."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatfiles.core.database.base import Base, BigIntPK, CreatedAtMixin, IdMixin


class File(IdMixin, CreatedAtMixin, Base):
    """
    Uploaded attachment. Created only after the object store acknowledged the
    write, never updated afterwards; the only mutation is deletion.
    """

    __tablename__ = "files"

    # Generated "<millis>_<16 hex>.<ext>" name; also the public handle in URLs.
    filename: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    original_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    owner_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("users.id"), nullable=False, index=True
    )
    storage_key: Mapped[str] = mapped_column(String(512), nullable=False)
    url: Mapped[str] = mapped_column(String(1024), nullable=False)

    owner: Mapped["User"] = relationship("User")


from chatfiles.core.auth.models import User  # noqa: E402
