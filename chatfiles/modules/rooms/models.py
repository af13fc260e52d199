"""Rooms and messages: only the fields file authorization walks through."""

from typing import Optional

from sqlalchemy import Column, ForeignKey, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatfiles.core.database.base import Base, BaseModel, BigIntPK, CreatedAtMixin, IdMixin


room_participants = Table(
    "room_participants",
    Base.metadata,
    Column("room_id", BigIntPK, ForeignKey("rooms.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", BigIntPK, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Room(BaseModel):
    """Chat room. Membership decides who may read files posted in it."""

    __tablename__ = "rooms"

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    participants: Mapped[list["User"]] = relationship("User", secondary=room_participants)


class Message(IdMixin, CreatedAtMixin, Base):
    """Chat message, optionally carrying exactly one file."""

    __tablename__ = "messages"

    room_id: Mapped[int] = mapped_column(
        BigIntPK, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_id: Mapped[int | None] = mapped_column(
        BigIntPK, ForeignKey("files.id", ondelete="SET NULL"), nullable=True, index=True
    )
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    room: Mapped["Room"] = relationship("Room")
    file: Mapped[Optional["File"]] = relationship("File")


from chatfiles.core.auth.models import User  # noqa: E402
from chatfiles.core.files.models import File  # noqa: E402
