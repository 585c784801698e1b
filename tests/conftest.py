import asyncio
import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from multiprompt.core.config import settings

# Throwaway SQLite database per test session
TEST_DB_PATH = Path(tempfile.gettempdir()) / f"multiprompt_test_{os.getpid()}.db"

# Override settings for tests
settings.database_url = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
settings.session_secret_key = "test-secret-key-that-is-at-least-32-bytes-long"
settings.fernet_key = "KxJCocbnA3KD20pkgSN3uUZybasKP1X9lAJDX4oLxoQ="  # test-only Fernet key
settings.app_env = "development"
settings.rate_limit_enabled = False
# No process-wide provider keys unless a test sets them
for _name in ("openai", "anthropic", "gemini"):
    setattr(settings, f"{_name}_api_key_1", "")
    setattr(settings, f"{_name}_model_1", "")
# Provider endpoints must not follow ambient SDK variables such as ANTHROPIC_BASE_URL
for _field in (
    "openai_base_url",
    "anthropic_base_url",
    "gemini_base_url",
    "anthropic_version",
    "anthropic_max_tokens",
):
    setattr(settings, _field, type(settings).model_fields[_field].default)

from multiprompt.core.dependencies import get_dispatcher  # noqa: E402
from multiprompt.core.rate_limit import limiter  # noqa: E402
from multiprompt.core.security import create_session_token, hash_password  # noqa: E402
from multiprompt.db.base import Base  # noqa: E402
from multiprompt.db.session import get_db  # noqa: E402
from multiprompt.fanout.dispatcher import FanOutDispatcher  # noqa: E402
from multiprompt.main import app  # noqa: E402
from multiprompt.models.user import User  # noqa: E402

limiter.enabled = False

# NullPool: every session opens its own aiosqlite connection, so no connection
# outlives the event loop of the test that created it
test_engine = create_async_engine(settings.database_url, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def user(db: AsyncSession) -> User:
    """Create a test user."""
    user = User(username="alice", password_hash=hash_password("testpassword123"))
    db.add(user)
    await db.commit()
    return user


@pytest.fixture
async def auth_headers(user: User) -> dict[str, str]:
    """Session cookie for the test user, as the browser would send it."""
    token = create_session_token(user.id)
    return {"Cookie": f"{settings.session_cookie_name}={token}"}


# ---------------------------------------------------------------------------
# Fake provider endpoints
# ---------------------------------------------------------------------------

_HOST_TO_PROVIDER = {
    "api.openai.com": "openai",
    "api.anthropic.com": "anthropic",
    "generativelanguage.googleapis.com": "gemini",
}

OK_BODIES = {
    "openai": {"choices": [{"message": {"role": "assistant", "content": "Hello from OpenAI"}}]},
    "anthropic": {"content": [{"type": "text", "text": "Hello from Anthropic"}]},
    "gemini": {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "from Gemini"}]}}]},
}


class FakeProviders:
    """httpx.MockTransport backend that records every outbound provider request.

    ``set(provider, ...)`` programs the reply for one provider; anything not
    programmed gets a canned 200 from OK_BODIES.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: dict[str, dict] = {}
        self.transport = httpx.MockTransport(self._handle)

    def set(
        self,
        provider: str,
        status_code: int = 200,
        json: object = None,
        text: str | None = None,
        delay: float = 0.0,
    ) -> None:
        self._replies[provider] = {"status_code": status_code, "json": json, "text": text, "delay": delay}

    def calls_to(self, provider: str) -> int:
        return sum(1 for r in self.requests if _HOST_TO_PROVIDER.get(r.url.host) == provider)

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        provider = _HOST_TO_PROVIDER.get(request.url.host, "")
        reply = self._replies.get(provider)
        if reply is None:
            return httpx.Response(200, json=OK_BODIES.get(provider, {}))
        if reply["delay"]:
            await asyncio.sleep(reply["delay"])
        if reply["text"] is not None:
            return httpx.Response(reply["status_code"], text=reply["text"])
        return httpx.Response(reply["status_code"], json=reply["json"])


@pytest.fixture
def fake() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
def fake_providers(fake: FakeProviders) -> FakeProviders:
    """Route the app's dispatcher through FakeProviders for the duration of a test."""
    dispatcher = FanOutDispatcher(transport=fake.transport)
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield fake
    app.dependency_overrides.pop(get_dispatcher, None)
