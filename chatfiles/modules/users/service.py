"""Current-user operations that touch the object store: avatar and account removal."""

import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.audit import AuditAction, create_audit_log
from chatfiles.core.auth.models import User
from chatfiles.core.exceptions import ValidationError
from chatfiles.core.files.access import FileCatalog
from chatfiles.core.storage import ObjectStore
from chatfiles.modules.rooms.models import room_participants

logger = logging.getLogger(__name__)

AVATAR_DIR = "avatars"


def avatar_key_prefix(user_id: int, key_prefix: str) -> str:
    """Avatars live under `<prefix>avatars/<user id>/`, apart from chat attachments."""
    return f"{key_prefix}{AVATAR_DIR}/{user_id}/"


class UserService:
    """Profile image and account deletion for the authenticated user."""

    def __init__(self, session: AsyncSession, store: ObjectStore):
        self.session = session
        self.store = store
        self.catalog = FileCatalog(session)

    def _owns_avatar_key(self, user: User, key: str) -> bool:
        return self.store.is_safe_key(key) and key.startswith(
            avatar_key_prefix(user.id, self.store.key_prefix)
        )

    async def _drop_profile_image(self, user: User) -> None:
        if not user.profile_image_key:
            return
        if not self._owns_avatar_key(user, user.profile_image_key):
            logger.warning(
                "Profile image %s of user %s is outside the avatar prefix; not deleting it",
                user.profile_image_key,
                user.id,
            )
            return
        result = await self.store.delete_quietly(user.profile_image_key)
        if not result.deleted:
            logger.warning(
                "Previous profile image %s of user %s left in storage",
                user.profile_image_key,
                user.id,
            )

    async def set_profile_image(self, user: User, storage_key: str) -> User:
        """
        Point the avatar at a new object; the old one is deleted best-effort.

        The key must sit under the user's own avatar prefix and must not be a
        catalogued attachment.
        """
        if not self._owns_avatar_key(user, storage_key):
            raise ValidationError(
                "Invalid profile image key", reason="invalid_storage_key", field="storageKey"
            )
        if await self.catalog.get_by_storage_key(storage_key) is not None:
            raise ValidationError(
                "Profile image key belongs to a file", reason="invalid_storage_key", field="storageKey"
            )

        old_key = user.profile_image_key
        if old_key and old_key != storage_key:
            await self._drop_profile_image(user)

        user.profile_image_key = storage_key
        user.profile_image_url = self.store.public_url(storage_key)
        await self.session.flush()

        await create_audit_log(
            session=self.session,
            action=AuditAction.SET_PROFILE_IMAGE,
            entity_type="User",
            entity_id=user.id,
            user_id=user.id,
            entity_identifier=storage_key,
            old_values={"profile_image_key": old_key},
            new_values={"profile_image_key": storage_key},
        )
        return user

    async def remove_profile_image(self, user: User) -> User:
        old_key = user.profile_image_key
        await self._drop_profile_image(user)

        user.profile_image_key = None
        user.profile_image_url = None
        await self.session.flush()

        if old_key:
            await create_audit_log(
                session=self.session,
                action=AuditAction.REMOVE_PROFILE_IMAGE,
                entity_type="User",
                entity_id=user.id,
                user_id=user.id,
                entity_identifier=old_key,
            )
        return user

    async def delete_account(self, user: User) -> None:
        """
        Remove the user, their files and memberships.

        Stored objects are deleted best-effort; catalog rows go regardless and
        leftovers are logged for reconciliation.
        """
        leftovers: list[str] = []

        for file in await self.catalog.list_owned(user.id):
            key = file.storage_key
            result = await self.store.delete_quietly(key)
            if not result.deleted:
                leftovers.append(key)
            await self.catalog.remove(file.id)

        await self._drop_profile_image(user)

        await self.session.execute(
            delete(room_participants).where(room_participants.c.user_id == user.id)
        )

        user_id, email = user.id, user.email
        await self.session.delete(user)
        await self.session.flush()

        if leftovers:
            logger.warning(
                "Account %s deleted; %d object(s) left in storage: %s",
                user_id,
                len(leftovers),
                ", ".join(leftovers),
            )

        await create_audit_log(
            session=self.session,
            action=AuditAction.DELETE_ACCOUNT,
            entity_type="User",
            entity_id=user_id,
            user_id=user_id,
            entity_identifier=email,
            new_values={"leftover_keys": leftovers} if leftovers else None,
        )
