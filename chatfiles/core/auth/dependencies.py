from typing import Annotated

from fastapi import Depends, Header, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.auth.jwt import decode_token
from chatfiles.core.auth.models import User
from chatfiles.core.database import get_db
from chatfiles.core.exceptions import AuthenticationError


async def _load_active_user(db: AsyncSession, token: str) -> User:
    payload = decode_token(token, token_type="access")
    user_id = int(payload["sub"])

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found", reason="invalid_token")

    if not user.is_active:
        raise AuthenticationError("User account is deactivated", reason="account_inactive")

    return user


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency to get current authenticated user from a Bearer token.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    if not authorization:
        raise AuthenticationError("Authorization header required")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid authorization header format", reason="invalid_token")

    return await _load_active_user(db, authorization.removeprefix("Bearer "))


async def get_file_requester(
    authorization: Annotated[str | None, Header()] = None,
    x_auth_token: Annotated[str | None, Header()] = None,
    x_session_id: Annotated[str | None, Header()] = None,
    token: str | None = Query(None),
    session_id: str | None = Query(None, alias="sessionId"),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the requester for file download/view links.

    Browsers open these links directly, so the token and session id may come
    from headers or from the query string. Both are required.
    """
    if authorization and authorization.startswith("Bearer "):
        access_token = authorization.removeprefix("Bearer ")
    else:
        access_token = x_auth_token or token
    session = x_session_id or session_id

    if not access_token or not session:
        raise AuthenticationError("Authentication required")

    return await _load_active_user(db, access_token)


# Convenience dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
FileRequester = Annotated[User, Depends(get_file_requester)]
