"""Pytest configuration and fixtures."""
import os
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from alembic import command
from alembic.config import Config as AlembicConfig
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Ensure the application uses a dedicated SQLite database during tests
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"
# Never call OpenRouter from tests
os.environ["MOCK_AI_SERVICE"] = "true"
os.environ["OPENROUTER_API_KEY"] = ""

from pilotvoice.config import get_settings
from pilotvoice.schemas.gdpr import GdprCheckResult
from pilotvoice.services.ai.anonymization_service import clean_result
from pilotvoice.services.auth_service import AuthService
from pilotvoice.services.test_data_service import TestDataService


BASE_DIR = Path(__file__).resolve().parent.parent
TEST_DB_PATH = BASE_DIR / "test.db"
settings = get_settings()


@pytest.fixture(scope="session", autouse=True)
def apply_migrations():
    """Apply database migrations against the test database."""
    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            pass  # migrations will reuse it

    alembic_cfg = AlembicConfig(str(BASE_DIR / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(BASE_DIR / "pilotvoice" / "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    alembic_cfg.attributes["configure_logger"] = False
    command.upgrade(alembic_cfg, "head")

    yield

    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            # On Windows the file may still be open; it is removed on the next run
            pass


@pytest.fixture
async def test_engine():
    """Create test database engine using the same database as migrations."""
    engine = create_async_engine(settings.database_url, echo=False, pool_pre_ping=True)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Create test database session."""
    async_session = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()


class FakeAnonymizer:
    """Anonymization strategy with scripted verdicts.

    Texts registered in ``personal`` are reported as personal data and
    rewritten to the mapped value; everything else is clean.
    """

    def __init__(self):
        self.personal: dict[str, str] = {}
        self.calls: list[str] = []
        self.error: Exception | None = None

    async def check_and_anonymize(self, text: str) -> GdprCheckResult:
        if not text or not text.strip():
            return clean_result(text)

        self.calls.append(text)
        if self.error is not None:
            raise self.error

        anonymized = self.personal.get(text)
        return GdprCheckResult(
            contains_personal_data=anonymized is not None,
            confidence=0.9,
            original_text=text,
            anonymized_text=anonymized,
            detected_data_types=["full_name"] if anonymized is not None else [],
        )


@pytest.fixture
def fake_anonymizer():
    return FakeAnonymizer()


@pytest.fixture
async def test_app(fake_anonymizer):
    """Create test app with the scripted anonymizer injected."""
    from pilotvoice.main import create_app

    app = create_app(settings, anonymization_service=fake_anonymizer, configure_logs=False)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def http_client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """Factory for Authorization headers carrying a valid token for ``user_id``."""

    def _headers(user_id: UUID | None = None) -> dict[str, str]:
        token = AuthService(settings).create_access_token(user_id or uuid4())
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def empty_survey(db_session):
    """A fresh open survey with no responses."""
    return await TestDataService(db_session).create_empty_survey(uuid4().hex[:12])
