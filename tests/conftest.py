"""
Pytest fixtures - per-test SQLite database, services, HTTP client, auth.
Challenge: Isolated tests; every test gets an empty schema in its own file.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from qaboard.db.base import Base
from qaboard.main import app
from qaboard.db.session import get_db
from qaboard.db.models import User
from qaboard.db.repositories import AnswerRepository, QuestionRepository
from qaboard.services.answer_service import AnswerService
from qaboard.services.question_service import QuestionService
from qaboard.core.security import hash_password, create_access_token


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as s:
        yield s


@pytest_asyncio.fixture
async def client(session: AsyncSession):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def _make_user(session: AsyncSession, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=hash_password("password123"),
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture
async def alice(session: AsyncSession) -> User:
    return await _make_user(session, "alice")


@pytest_asyncio.fixture
async def bob(session: AsyncSession) -> User:
    return await _make_user(session, "bob")


@pytest.fixture
def auth_headers(alice: User) -> dict:
    token = create_access_token(alice.id, alice.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def bob_headers(bob: User) -> dict:
    token = create_access_token(bob.id, bob.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def question_service(session: AsyncSession) -> QuestionService:
    return QuestionService(QuestionRepository(session), AnswerRepository(session))


@pytest.fixture
def answer_service(session: AsyncSession) -> AnswerService:
    return AnswerService(AnswerRepository(session))
