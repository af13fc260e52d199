from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.audit.models import AuditLog


class AuditAction(StrEnum):
    """Actions recorded against files and accounts."""

    UPLOAD_FILE = "UPLOAD_FILE"
    DELETE_FILE = "DELETE_FILE"
    SET_PROFILE_IMAGE = "SET_PROFILE_IMAGE"
    REMOVE_PROFILE_IMAGE = "REMOVE_PROFILE_IMAGE"
    DELETE_ACCOUNT = "DELETE_ACCOUNT"
    # Object left in the store while its catalog row is gone; picked up by reconciliation.
    STORE_DIVERGENCE = "STORE_DIVERGENCE"


async def create_audit_log(
    session: AsyncSession,
    action: str | AuditAction,
    entity_type: str,
    entity_id: int,
    user_id: int | None = None,
    entity_identifier: str | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
    comment: str | None = None,
) -> AuditLog:
    """
    Create an audit log entry.

    Args:
        session: Database session
        action: Action performed (e.g., UPLOAD_FILE, DELETE_FILE)
        entity_type: Type of entity (e.g., File, User)
        entity_id: ID of the entity
        user_id: ID of the user who performed the action
        entity_identifier: Human-readable identifier (e.g., storage key)
        old_values: State before change
        new_values: State after change
        comment: Additional comment

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        user_id=user_id,
        action=str(action),
        entity_type=entity_type,
        entity_id=entity_id,
        entity_identifier=entity_identifier,
        old_values=old_values,
        new_values=new_values,
        comment=comment,
    )

    session.add(audit_log)
    await session.flush()

    return audit_log
