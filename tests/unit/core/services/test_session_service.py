import pytest

from src.authgate.core.services import SessionService
from src.authgate.core.storage import InMemorySessionStorage
from src.authgate.entities.core.user import User


@pytest.fixture
def storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def session_service(storage) -> SessionService:
    return SessionService(storage, max_age_seconds=3600)


class TestSessionService:
    @pytest.mark.asyncio
    async def test_new_session_is_anonymous_and_not_stored(self, session_service, storage):
        session = await session_service.load_or_create(None)

        assert session.uid is None
        assert not session.is_authenticated
        assert not await storage.contains(session.id)

    @pytest.mark.asyncio
    async def test_anonymous_requests_do_not_grow_storage(self, session_service, storage):
        for _ in range(20):
            await session_service.load_or_create(None)

        assert storage._entries == {}

    @pytest.mark.asyncio
    async def test_existing_session_is_loaded(self, session_service):
        created = await session_service.load_or_create(None)
        await session_service.save(created)

        loaded = await session_service.load_or_create(created.id)

        assert loaded.id == created.id

    @pytest.mark.asyncio
    async def test_unknown_id_starts_new_session(self, session_service):
        session = await session_service.load_or_create("forged-id")

        assert session.id != "forged-id"

    @pytest.mark.asyncio
    async def test_attach_user_records_uid_and_provider_token(self, session_service):
        session = await session_service.load_or_create(None)
        user = User(username="bob", github_id="42")

        await session_service.attach_user(session, user, "github", "t1")

        stored = await session_service.get(session.id)
        assert stored.uid == user.id
        assert stored.provider_tokens == {"github": "t1"}

    @pytest.mark.asyncio
    async def test_logout_clears_uid(self, session_service):
        session = await session_service.load_or_create(None)
        await session_service.attach_user(session, User(username="alice"))

        await session_service.logout(session)

        stored = await session_service.get(session.id)
        assert stored is not None
        assert stored.uid is None
        assert stored.provider_tokens == {}
