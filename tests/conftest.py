"""
Pytest Configuration and Fixtures.

API tests run against a throwaway SQLite database per test and a fake text
generator, both swapped in through ``app.dependency_overrides``.
"""
import asyncio
import os

# Must be set before app modules build the engine from settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("MODE", "test")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.apis.deps import get_flashcards_generator
from app.core.db import schemas  # noqa: F401
from app.core.db.base import Base, get_session
from app.core.db.schemas.auth import User
from app.modules.flashcards.main import FlashcardsGenerator
from main import create_app


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: API tests against SQLite")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


SAMPLE_OUTPUT = (
    "Q: What does the Earth revolve around?\n"
    "A: The Sun.\n"
    "\n"
    "Q: What is 2+2?\n"
    "A: 4."
)


class FakeTextGenerator:
    """Stands in for Gemini: returns canned text, raises, or stalls."""

    def __init__(self, reply="", *, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []

    async def generate(self, instruction: str) -> str:
        self.calls.append(instruction)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def make_generator():
    return FakeTextGenerator


@pytest.fixture
def sample_output():
    return SAMPLE_OUTPUT


@pytest.fixture
def fake_generator():
    return FakeTextGenerator(SAMPLE_OUTPUT)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def users(session_maker):
    """Three provisioned users: alice (1), bob (2), carol (3)."""
    async with session_maker() as session:
        rows = [
            User(id=1, email="alice@example.com"),
            User(id=2, email="bob@example.com"),
            User(id=3, email="carol@example.com"),
        ]
        session.add_all(rows)
        await session.commit()
    return {"alice": 1, "bob": 2, "carol": 3}


@pytest.fixture
def app(session_maker, fake_generator):
    app = create_app()

    async def _get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_flashcards_generator] = lambda: FlashcardsGenerator(
        fake_generator, timeout_seconds=1.0
    )
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as ac:
        yield ac
