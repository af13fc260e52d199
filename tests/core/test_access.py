"""Tests for the file authorization resolvers."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.exceptions import AuthorizationError, NotFoundError
from chatfiles.core.files.access import (
    FileCatalog,
    Forbidden,
    Granted,
    MissingStage,
    NotFound,
    raise_for_outcome,
    resolve_ownership,
    resolve_room_access,
)
from chatfiles.core.files.models import File


async def _stored_file(
    db_session: AsyncSession, owner_id: int, filename: str = "1700000000000_0123456789abcdef.png"
) -> File:
    file = File(
        filename=filename,
        original_filename="cat.png",
        content_type="image/png",
        file_size=1024,
        owner_id=owner_id,
        storage_key=f"uploads/{filename}",
        url=f"https://storage.test/uploads/{filename}",
    )
    db_session.add(file)
    await db_session.commit()
    return file


class TestRoomAccess:
    """Tests for resolve_room_access."""

    async def test_participant_is_granted(self, db_session, make_user, make_room, post_file):
        owner, _ = await make_user("owner@chat.test")
        friend, _ = await make_user("friend@chat.test")
        room = await make_room(owner, friend)
        file = await _stored_file(db_session, owner.id)
        await post_file(room, file.id)

        outcome = await resolve_room_access(FileCatalog(db_session), friend.id, file.filename)

        assert isinstance(outcome, Granted)
        assert outcome.file.id == file.id

    async def test_unknown_filename(self, db_session, make_user):
        user, _ = await make_user("u@chat.test")
        outcome = await resolve_room_access(FileCatalog(db_session), user.id, "nope.png")
        assert outcome == NotFound(MissingStage.FILE)

    async def test_file_without_message(self, db_session, make_user):
        """Uploaded but never posted: even the owner gets the message stage."""
        owner, _ = await make_user("owner@chat.test")
        file = await _stored_file(db_session, owner.id)

        outcome = await resolve_room_access(FileCatalog(db_session), owner.id, file.filename)

        assert outcome == NotFound(MissingStage.MESSAGE)

    async def test_non_participant_is_forbidden(self, db_session, make_user, make_room, post_file):
        owner, _ = await make_user("owner@chat.test")
        outsider, _ = await make_user("outsider@chat.test")
        room = await make_room(owner)
        file = await _stored_file(db_session, owner.id)
        await post_file(room, file.id)

        outcome = await resolve_room_access(FileCatalog(db_session), outsider.id, file.filename)

        assert outcome == Forbidden()

    async def test_owner_outside_room_is_forbidden(self, db_session, make_user, make_room, post_file):
        """Read access follows room membership, not ownership."""
        owner, _ = await make_user("owner@chat.test")
        other, _ = await make_user("other@chat.test")
        room = await make_room(other)
        file = await _stored_file(db_session, owner.id)
        await post_file(room, file.id)

        outcome = await resolve_room_access(FileCatalog(db_session), owner.id, file.filename)

        assert outcome == Forbidden()


class TestOwnership:
    """Tests for resolve_ownership."""

    async def test_owner_granted(self, db_session, make_user):
        owner, _ = await make_user("owner@chat.test")
        file = await _stored_file(db_session, owner.id)
        outcome = await resolve_ownership(FileCatalog(db_session), owner.id, file.id)
        assert isinstance(outcome, Granted)

    async def test_non_owner_forbidden_even_in_room(self, db_session, make_user, make_room, post_file):
        owner, _ = await make_user("owner@chat.test")
        friend, _ = await make_user("friend@chat.test")
        room = await make_room(owner, friend)
        file = await _stored_file(db_session, owner.id)
        await post_file(room, file.id)

        outcome = await resolve_ownership(FileCatalog(db_session), friend.id, file.id)

        assert outcome == Forbidden()

    async def test_missing_file(self, db_session, make_user):
        owner, _ = await make_user("owner@chat.test")
        outcome = await resolve_ownership(FileCatalog(db_session), owner.id, 999)
        assert outcome == NotFound(MissingStage.FILE)


class TestRaiseForOutcome:
    def test_maps_outcomes_to_errors(self):
        with pytest.raises(NotFoundError) as exc_info:
            raise_for_outcome(NotFound(MissingStage.FILE))
        assert exc_info.value.reason == "file_not_found"

        with pytest.raises(NotFoundError) as exc_info:
            raise_for_outcome(NotFound(MissingStage.MESSAGE))
        assert exc_info.value.reason == "message_not_found"

        with pytest.raises(AuthorizationError) as exc_info:
            raise_for_outcome(Forbidden())
        assert exc_info.value.status_code == 403


class TestCatalogRemove:
    async def test_remove_detaches_messages(self, db_session, make_user, make_room, post_file):
        owner, _ = await make_user("owner@chat.test")
        room = await make_room(owner)
        file = await _stored_file(db_session, owner.id)
        message = await post_file(room, file.id, content="look")

        catalog = FileCatalog(db_session)
        assert await catalog.remove(file.id) is True
        await db_session.commit()
        await db_session.refresh(message)

        assert message.file_id is None
        assert await catalog.get_by_id(file.id) is None

    async def test_second_remove_reports_missing(self, db_session, make_user):
        owner, _ = await make_user("owner@chat.test")
        file = await _stored_file(db_session, owner.id)
        catalog = FileCatalog(db_session)

        assert await catalog.remove(file.id) is True
        assert await catalog.remove(file.id) is False
