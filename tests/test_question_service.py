"""
Question service tests - search dedup, OR coverage, pagination, ordering,
endorsements, and thread deletion against a real SQLite store.
"""

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from qaboard.core.exceptions import InvalidArgument, NotFound, StoreUnavailable
from qaboard.db.models import Question, User, answer_voter, question_voter
from qaboard.db.repositories import base_repository
from qaboard.db.repositories import AnswerRepository, QuestionRepository
from qaboard.db.session import init_models
from qaboard.schemas.answer import AnswerCreate
from qaboard.schemas.question import QuestionCreate, QuestionUpdate
from qaboard.services.question_service import PAGE_SIZE, QuestionService


async def _ask(svc, author, subject="Subject", body="Body"):
    return await svc.create(QuestionCreate(subject=subject, body=body), author.id)


@pytest.mark.asyncio
async def test_question_with_several_matching_answers_appears_once(question_service, alice, bob):
    q = await _ask(question_service, alice, "Event loops", "How do I start one?")
    await question_service.add_answer(q.id, AnswerCreate(body="asyncio.run does it"), bob.id)
    await question_service.add_answer(q.id, AnswerCreate(body="or asyncio.Runner"), alice.id)
    await _ask(question_service, alice, "Unrelated", "Nothing here")

    page = await question_service.search("asyncio", 0)

    assert [item.id for item in page.items] == [q.id]
    assert page.total_elements == 1
    assert page.total_pages == 1
    assert page.items[0].answer_count == 2


@pytest.mark.asyncio
async def test_answer_author_username_finds_parent_question(question_service, alice, bob):
    q = await _ask(question_service, alice, "Packaging", "wheel or sdist")
    await question_service.add_answer(q.id, AnswerCreate(body="wheels, always"), bob.id)
    await _ask(question_service, alice, "Typing", "Protocols?")

    page = await question_service.search("bob", 0)

    assert [item.id for item in page.items] == [q.id]


@pytest.mark.asyncio
async def test_question_author_and_body_fields_are_searched(question_service, alice, bob):
    by_bob = await _ask(question_service, bob, "Logging", "handlers")
    in_body = await _ask(question_service, alice, "Config", "pydantic settings")

    assert [i.id for i in (await question_service.search("bob", 0)).items] == [by_bob.id]
    assert [i.id for i in (await question_service.search("pydantic", 0)).items] == [in_body.id]


@pytest.mark.asyncio
async def test_answer_without_author_still_matches(question_service, alice):
    q = await _ask(question_service, alice, "Legacy", "imported thread")
    await question_service.add_answer(q.id, AnswerCreate(body="orphaned reply"), None)

    page = await question_service.search("orphaned", 0)

    assert [item.id for item in page.items] == [q.id]


@pytest.mark.asyncio
async def test_example_thread_found_by_answer_author_and_answer_body(question_service, alice, bob):
    q = await _ask(question_service, alice, "Spring vs Go", "which is better")
    await question_service.add_answer(q.id, AnswerCreate(body="Go is simpler"), bob.id)

    assert [i.id for i in (await question_service.search("bob", 0)).items] == [q.id]
    # SQLite LIKE is case-insensitive for ASCII
    assert [i.id for i in (await question_service.search("go", 0)).items] == [q.id]


@pytest.mark.asyncio
async def test_pagination_covers_every_question_newest_first(question_service, alice, bob):
    created = [await _ask(question_service, alice, f"Question {n}") for n in range(23)]
    await question_service.add_answer(created[0].id, AnswerCreate(body="first"), bob.id)
    await question_service.add_answer(created[0].id, AnswerCreate(body="second"), bob.id)

    pages = [await question_service.search("", p) for p in range(3)]

    assert all(p.total_elements == 23 for p in pages)
    assert all(p.total_pages == 3 for p in pages)
    assert [len(p.items) for p in pages] == [PAGE_SIZE, PAGE_SIZE, 3]
    ordered = [item for p in pages for item in p.items]
    assert [i.id for i in ordered] == [q.id for q in reversed(created)]
    stamps = [i.created_at for i in ordered]
    assert all(a >= b for a, b in zip(stamps, stamps[1:]))
    assert pages[0].has_next and not pages[0].has_previous
    assert pages[2].has_previous and not pages[2].has_next


@pytest.mark.asyncio
async def test_page_past_the_end_is_empty_with_totals(question_service, alice):
    for n in range(4):
        await _ask(question_service, alice, f"Q{n}")

    page = await question_service.search("", 5)

    assert page.items == []
    assert page.is_empty
    assert page.page == 5
    assert page.total_elements == 4
    assert page.total_pages == 1


@pytest.mark.asyncio
async def test_empty_store_gives_empty_first_page(question_service):
    page = await question_service.search("", 0)
    assert page.items == []
    assert page.total_elements == 0
    assert page.total_pages == 0
    assert page.size == PAGE_SIZE


@pytest.mark.asyncio
async def test_negative_page_is_rejected(question_service):
    with pytest.raises(InvalidArgument):
        await question_service.search("", -1)


@pytest.mark.asyncio
async def test_wildcard_characters_are_not_escaped(question_service, alice):
    await _ask(question_service, alice, "plain", "text")
    await _ask(question_service, alice, "other", "words")

    page = await question_service.search("%", 0)

    assert page.total_elements == 2


@pytest.mark.asyncio
async def test_endorsing_twice_keeps_one_membership(question_service, session, alice, bob):
    q = await _ask(question_service, alice)

    await question_service.endorse(q.id, bob.id)
    after_first = (await question_service.get_question(q.id)).endorser_count
    await question_service.endorse(q.id, bob.id)
    after_second = (await question_service.get_question(q.id)).endorser_count
    await question_service.endorse(q.id, alice.id)

    assert after_first == after_second == 1
    assert (await question_service.get_question(q.id)).endorser_count == 2
    assert await QuestionRepository(session).endorser_ids(q.id) == {alice.id, bob.id}


@pytest.mark.asyncio
async def test_endorser_count_shown_in_search_results(question_service, alice, bob):
    q = await _ask(question_service, alice, "Votes")
    await question_service.endorse(q.id, bob.id)

    page = await question_service.search("Votes", 0)

    assert page.items[0].endorser_count == 1


@pytest.mark.asyncio
async def test_endorsing_missing_question_raises_not_found(question_service, bob):
    with pytest.raises(NotFound):
        await question_service.endorse(404, bob.id)


@pytest.mark.asyncio
async def test_get_question_populates_author_and_answers(question_service, alice, bob):
    q = await _ask(question_service, alice, "Detail", "full body")
    first = await question_service.add_answer(q.id, AnswerCreate(body="one"), bob.id)
    second = await question_service.add_answer(q.id, AnswerCreate(body="two"), alice.id)

    detail = await question_service.get_question(q.id)

    assert detail.author_username == "alice"
    assert detail.body == "full body"
    assert [a.id for a in detail.answers] == [first.id, second.id]
    assert [a.author_username for a in detail.answers] == ["bob", "alice"]


@pytest.mark.asyncio
async def test_get_missing_question_raises_not_found(question_service):
    with pytest.raises(NotFound) as info:
        await question_service.get_question(12345)
    assert info.value.entity == "Question"
    assert info.value.identifier == 12345


@pytest.mark.asyncio
async def test_add_answer_to_missing_question_raises_not_found(question_service, bob):
    with pytest.raises(NotFound):
        await question_service.add_answer(999, AnswerCreate(body="hello"), bob.id)


@pytest.mark.asyncio
async def test_modify_updates_fields_and_stamps_modified_at(question_service, alice):
    q = await _ask(question_service, alice, "Old", "old body")
    assert q.modified_at is None

    updated = await question_service.modify(q.id, QuestionUpdate(subject="New", body="new body"))

    assert updated.subject == "New"
    assert updated.body == "new body"
    assert updated.modified_at is not None
    assert updated.author_id == alice.id


@pytest.mark.asyncio
async def test_delete_cascades_to_answers_and_votes(question_service, answer_service, session, alice, bob):
    q = await _ask(question_service, alice, "Doomed")
    answer = await question_service.add_answer(q.id, AnswerCreate(body="gone soon"), bob.id)
    await question_service.endorse(q.id, bob.id)
    await answer_service.endorse(answer.id, alice.id)
    survivor = await _ask(question_service, bob, "Survivor")

    await question_service.delete(q.id)

    with pytest.raises(NotFound):
        await question_service.get_question(q.id)
    with pytest.raises(NotFound):
        await answer_service.get_answer(answer.id)
    assert (await session.execute(select(func.count()).select_from(question_voter))).scalar_one() == 0
    assert (await session.execute(select(func.count()).select_from(answer_voter))).scalar_one() == 0
    assert [i.id for i in (await question_service.search("", 0)).items] == [survivor.id]


@pytest.mark.asyncio
async def test_unreachable_store_raises_store_unavailable(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'board.db'}")
    try:
        async with async_sessionmaker(engine, class_=AsyncSession)() as session:
            svc = QuestionService(QuestionRepository(session), AnswerRepository(session))
            with pytest.raises(StoreUnavailable) as info:
                await svc.search("anything", 0)
            assert info.value.__cause__ is not None
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_huge_page_number_is_empty_not_an_error(question_service, alice):
    await _ask(question_service, alice, "Only one")

    page = await question_service.search("", 10**18)

    assert page.items == []
    assert page.page == 10**18
    assert page.total_elements == 1
    assert not page.has_next


@pytest.mark.asyncio
async def test_get_question_reports_whether_viewer_endorsed(question_service, alice, bob):
    q = await _ask(question_service, alice, "Endorsed?")
    await question_service.endorse(q.id, bob.id)

    assert (await question_service.get_question(q.id, bob.id)).endorsed is True
    assert (await question_service.get_question(q.id, alice.id)).endorsed is False
    assert (await question_service.get_question(q.id)).endorsed is False


@pytest.mark.asyncio
async def test_concurrent_endorsements_converge_to_all_users(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'votes.db'}",
        connect_args={"timeout": 30},
    )
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        await init_models(engine)
        async with maker() as setup:
            users = [User(username=f"user{n}", email=f"user{n}@example.com", hashed_password="x") for n in range(5)]
            setup.add_all(users)
            await setup.flush()
            question = Question(subject="Popular", body="vote here", author_id=users[0].id)
            setup.add(question)
            await setup.commit()
            user_ids = {u.id for u in users}
            question_id = question.id

        async def endorse_in_own_transaction(user_id):
            async with maker() as s:
                svc = QuestionService(QuestionRepository(s), AnswerRepository(s))
                await svc.endorse(question_id, user_id)
                await s.commit()

        # Every user twice, all interleaved
        await asyncio.gather(*(endorse_in_own_transaction(uid) for uid in [*user_ids, *user_ids]))

        async with maker() as check:
            assert await QuestionRepository(check).endorser_ids(question_id) == user_ids
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_endorsement_without_native_upsert_uses_savepoint(question_service, session, monkeypatch, alice, bob):
    monkeypatch.setattr(base_repository, "_CONFLICT_IGNORING_INSERTS", {})
    q = await _ask(question_service, alice)

    await question_service.endorse(q.id, bob.id)
    await question_service.endorse(q.id, bob.id)
    await question_service.endorse(q.id, alice.id)

    assert await QuestionRepository(session).endorser_ids(q.id) == {alice.id, bob.id}
    assert (await question_service.get_question(q.id)).endorser_count == 2
