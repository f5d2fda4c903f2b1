"""
StackIt Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   API tests run the real FastAPI app over httpx's ASGITransport against
       an in-memory SQLite database; service unit tests use a mock session.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession for service unit tests
    ├── db_engine: In-memory SQLite engine with the schema created
    ├── session_factory: Sessions bound to db_engine
    ├── test_client: AsyncClient wired to the app, one DB session per request
    ├── make_user / auth_headers: Signed-in identities and their bearer headers
    └── seed_question / seed_answer: Insert rows directly, bypassing the API
"""

import os

# Must be set before stackit.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTH_JWT_SECRET"] = "test-secret-not-for-production"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from stackit.database import Base, get_db_session
from stackit.models import Answer, Question
from stackit.services.identity_base import Identity
from stackit.services.jwt_identity import identity_provider


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        async def test_blank_title(mock_db_session):
            with pytest.raises(ValidationError):
                await question_service.create_question(mock_db_session, identity, payload)
            mock_db_session.add.assert_not_called()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock(return_value=None)
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    # StaticPool: every session shares the one in-memory connection
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_client(db_engine, session_factory, monkeypatch) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app, with get_db_session overridden
    and the health check pointed at the test engine.

    Each request gets a fresh session, like production, so no request reads
    ORM state cached by an earlier one.
    """
    from stackit.main import app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    monkeypatch.setattr("stackit.database.engine", db_engine)
    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user():
    """Factory returning a fresh Identity; usernames default to unique values."""

    def _make(
        username: Optional[str] = None,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> Identity:
        user_id = uuid4()
        return Identity(
            user_id=user_id,
            email=email,
            username=username if username is not None else f"user_{user_id.hex[:8]}",
            full_name=full_name,
        )

    return _make


@pytest.fixture
def auth_headers():
    """Bearer header for an Identity, signed with the test secret."""

    def _headers(identity: Identity) -> Dict[str, str]:
        token = identity_provider.issue_token(
            user_id=identity.user_id,
            email=identity.email,
            username=identity.username,
            full_name=identity.full_name,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def seed_question(session_factory):
    """
    Insert a question row directly.

    created_at is set explicitly so ordering tests do not depend on clock
    resolution.
    """

    async def _seed(
        title: str = "How do I center a div?",
        description: str = "I have tried flexbox and grid.",
        tags: Optional[List[str]] = None,
        owner: Optional[Identity] = None,
        votes: int = 0,
        views: int = 0,
        has_accepted_answer: bool = False,
        minutes_ago: int = 0,
    ) -> UUID:
        created_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
        async with session_factory() as session:
            question = Question(
                title=title,
                description=description,
                tags=tags or [],
                author_name=owner.display_name if owner else "seed",
                user_id=owner.user_id if owner else None,
                votes=votes,
                views=views,
                has_accepted_answer=has_accepted_answer,
                created_at=created_at,
                updated_at=created_at,
            )
            session.add(question)
            await session.commit()
            return question.id

    return _seed


@pytest.fixture
def seed_answer(session_factory):
    async def _seed(
        question_id: UUID,
        content: str = "Use display: grid; place-items: center.",
        owner: Optional[Identity] = None,
        minutes_ago: int = 0,
    ) -> UUID:
        created_at = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
        async with session_factory() as session:
            answer = Answer(
                question_id=question_id,
                content=content,
                author_name=owner.display_name if owner else "seed",
                user_id=owner.user_id if owner else None,
                created_at=created_at,
                updated_at=created_at,
            )
            session.add(answer)
            await session.commit()
            return answer.id

    return _seed
