from collections.abc import AsyncGenerator
from urllib.parse import quote

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from chatfiles.core.auth.jwt import create_access_token
from chatfiles.core.auth.models import User
from chatfiles.core.database import get_db
from chatfiles.core.database.base import Base
from chatfiles.core.exceptions import StoreError
from chatfiles.core.storage import ObjectStore, get_object_store
from chatfiles.main import app
from chatfiles.modules.rooms.models import Message, Room

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_async_session = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class InMemoryObjectStore(ObjectStore):
    """Object store fake. Records every backend call that got past the key check."""

    def __init__(self, key_prefix: str = "uploads/"):
        super().__init__(key_prefix)
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_puts = False
        self.fail_deletes = False

    async def _put(self, key, body, content_type):
        self.calls.append(("put", key))
        if self.fail_puts:
            raise StoreError("Failed to store file")
        data = body if isinstance(body, bytes) else body.read()
        self.objects[key] = (data, content_type)

    async def _presign_get(self, key, expires_in, disposition):
        self.calls.append(("presign", key))
        url = f"https://storage.test/{key}?X-Amz-Expires={expires_in}"
        if disposition:
            url += f"&response-content-disposition={quote(disposition, safe='')}"
        return url

    async def _delete(self, key):
        self.calls.append(("delete", key))
        if self.fail_deletes:
            raise StoreError("Failed to delete file")
        self.objects.pop(key, None)

    def _public_url(self, key):
        return f"https://storage.test/{key}"


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get test database session."""
    async with test_async_session() as session:
        yield session


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
async def client(db_session: AsyncSession, store: InMemoryObjectStore) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client with database and object store overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_object_store] = lambda: store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session: AsyncSession):
    """Factory: create an active user and return it with auth headers."""

    async def _make(email: str, full_name: str = "Chat User") -> tuple[User, dict[str, str]]:
        user = User(email=email, full_name=full_name, is_active=True)
        db_session.add(user)
        await db_session.commit()
        token = create_access_token(user.id)
        headers = {
            "Authorization": f"Bearer {token}",
            "x-auth-token": token,
            "x-session-id": f"session-{user.id}",
        }
        return user, headers

    return _make


@pytest.fixture
def make_room(db_session: AsyncSession):
    """Factory: create a room with the given participants."""

    async def _make(*participants: User, name: str = "general") -> Room:
        room = Room(name=name, participants=list(participants))
        db_session.add(room)
        await db_session.commit()
        return room

    return _make


@pytest.fixture
def post_file(db_session: AsyncSession):
    """Factory: post a message carrying a file into a room."""

    async def _post(room: Room, file_id: int, content: str | None = None) -> Message:
        message = Message(room_id=room.id, file_id=file_id, content=content)
        db_session.add(message)
        await db_session.commit()
        return message

    return _post
