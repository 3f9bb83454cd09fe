"""
BDD step definitions for the search feature (pytest-bdd).
Steps are synchronous; each one runs its own transaction on a file database
shared by the scenario.
"""

import asyncio

import pytest
from pytest_bdd import scenarios, given, when, then, parsers
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from qaboard.db.base import Base
from qaboard.db.models import User
from qaboard.db.repositories import AnswerRepository, QuestionRepository, UserRepository
from qaboard.schemas.answer import AnswerCreate
from qaboard.schemas.question import QuestionCreate
from qaboard.services.question_service import QuestionService

scenarios("../features/search.feature")


def _run(url: str, work):
    """Run `work(session)` in one committed transaction on a fresh event loop."""

    async def runner():
        engine = create_async_engine(url, poolclass=NullPool)
        try:
            async with async_sessionmaker(engine, expire_on_commit=False)() as session:
                result = await work(session)
                await session.commit()
                return result
        finally:
            await engine.dispose()

    return asyncio.run(runner())


def _questions(session) -> QuestionService:
    return QuestionService(QuestionRepository(session), AnswerRepository(session))


async def _user(session, username: str) -> User:
    repo = UserRepository(session)
    user = await repo.get_by_username(username)
    if user is None:
        user = await repo.add(
            User(username=username, email=f"{username}@example.com", hashed_password="unused")
        )
    return user


@pytest.fixture
def board(tmp_path):
    """Scenario state: database URL, last question id, last result page."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'bdd.db'}"

    async def create_schema(session):
        conn = await session.connection()
        await conn.run_sync(Base.metadata.create_all)

    _run(url, create_schema)
    return {"url": url}


@given(parsers.parse('"{username}" asked "{subject}" with body "{body}"'))
def asked(board, username, subject, body):
    async def work(session):
        author = await _user(session, username)
        question = await _questions(session).create(QuestionCreate(subject=subject, body=body), author.id)
        return question.id

    board["question_id"] = _run(board["url"], work)


@given(parsers.parse('"{username}" answered "{body}"'))
def answered(board, username, body):
    async def work(session):
        author = await _user(session, username)
        await _questions(session).add_answer(board["question_id"], AnswerCreate(body=body), author.id)

    _run(board["url"], work)


@when(parsers.parse('I search for "{keyword}"'))
def search(board, keyword):
    async def work(session):
        return await _questions(session).search(keyword, 0)

    board["page"] = _run(board["url"], work)


@then("the results contain that question exactly once")
def contains_once(board):
    ids = [item.id for item in board["page"].items]
    assert ids.count(board["question_id"]) == 1
    assert board["page"].total_elements == len(ids)


@then(parsers.parse("the page is empty and reports {count:d} matches"))
def empty_page(board, count):
    assert board["page"].items == []
    assert board["page"].total_elements == count
