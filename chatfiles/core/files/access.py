"""
Who may read or delete a file.

Read access walks file -> message -> room -> participant; delete access is
owner-only. Both resolvers only read, and return an outcome instead of
raising so callers choose how much to reveal.

Not-found and forbidden are kept apart all the way to the HTTP layer
(404 vs 403).
"""

from dataclasses import dataclass
from enum import StrEnum

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.exceptions import AuthorizationError, NotFoundError
from chatfiles.core.files.models import File
from chatfiles.modules.rooms.models import Message, Room, room_participants


class MissingStage(StrEnum):
    FILE = "file"
    MESSAGE = "message"


@dataclass(frozen=True)
class Granted:
    file: File


@dataclass(frozen=True)
class NotFound:
    stage: MissingStage


@dataclass(frozen=True)
class Forbidden:
    pass


AccessOutcome = Granted | NotFound | Forbidden


class FileCatalog:
    """Catalog queries used by the resolvers and the delete path."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_filename(self, filename: str) -> File | None:
        result = await self.session.execute(select(File).where(File.filename == filename))
        return result.scalar_one_or_none()

    async def get_by_id(self, file_id: int) -> File | None:
        result = await self.session.execute(select(File).where(File.id == file_id))
        return result.scalar_one_or_none()

    async def get_by_storage_key(self, storage_key: str) -> File | None:
        result = await self.session.execute(select(File).where(File.storage_key == storage_key))
        return result.scalar_one_or_none()

    async def list_owned(self, owner_id: int) -> list[File]:
        result = await self.session.execute(select(File).where(File.owner_id == owner_id))
        return list(result.scalars().all())

    async def get_message_for_file(self, file_id: int) -> Message | None:
        stmt = select(Message).where(Message.file_id == file_id).order_by(Message.id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def is_participant(self, room_id: int, user_id: int) -> bool:
        stmt = (
            select(Room.id)
            .join(room_participants, room_participants.c.room_id == Room.id)
            .where(Room.id == room_id, room_participants.c.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def remove(self, file_id: int) -> bool:
        """
        Detach messages and delete the row. False when no row matched, e.g. a
        concurrent delete got there first.
        """
        await self.session.execute(
            update(Message).where(Message.file_id == file_id).values(file_id=None)
        )
        result = await self.session.execute(delete(File).where(File.id == file_id))
        return result.rowcount > 0


async def resolve_room_access(
    catalog: FileCatalog, requester_id: int, filename: str
) -> AccessOutcome:
    file = await catalog.get_by_filename(filename)
    if file is None:
        return NotFound(MissingStage.FILE)

    message = await catalog.get_message_for_file(file.id)
    if message is None:
        return NotFound(MissingStage.MESSAGE)

    if not await catalog.is_participant(message.room_id, requester_id):
        return Forbidden()

    return Granted(file)


async def resolve_ownership(
    catalog: FileCatalog, requester_id: int, file_id: int
) -> AccessOutcome:
    file = await catalog.get_by_id(file_id)
    if file is None:
        return NotFound(MissingStage.FILE)
    if file.owner_id != requester_id:
        return Forbidden()
    return Granted(file)


def raise_for_outcome(
    outcome: AccessOutcome, forbidden_message: str = "Not authorized to access this file"
) -> File:
    """Unwrap a granted outcome or raise the matching error."""
    if isinstance(outcome, Granted):
        return outcome.file
    if isinstance(outcome, NotFound):
        if outcome.stage == MissingStage.MESSAGE:
            raise NotFoundError("File message", reason="message_not_found")
        raise NotFoundError("File", reason="file_not_found")
    raise AuthorizationError(forbidden_message, reason="access_denied")
