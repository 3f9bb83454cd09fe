"""
Question service - search, thread lifecycle, and endorsements.
Challenge: Keep controllers thin; one service call is one transaction's worth of work.
Design: Depends on repositories only; raises domain errors instead of returning None.
"""

import logging

from qaboard.core.exceptions import InvalidArgument, NotFound, translate_store_errors
from qaboard.db.base import utcnow
from qaboard.db.models import Answer, Question
from qaboard.db.repositories.answer_repository import AnswerRepository
from qaboard.db.repositories.question_repository import QuestionRepository
from qaboard.schemas.answer import AnswerCreate, AnswerResponse
from qaboard.schemas.page import Page
from qaboard.schemas.question import QuestionCreate, QuestionDetail, QuestionSummary, QuestionUpdate
from qaboard.search.predicate import build_search_predicate

logger = logging.getLogger(__name__)

# Questions per search page
PAGE_SIZE = 10


def answer_to_response(answer: Answer, endorser_count: int = 0) -> AnswerResponse:
    """Map model to API response with author username."""
    return AnswerResponse(
        id=answer.id,
        question_id=answer.question_id,
        body=answer.body,
        author_id=answer.author_id,
        author_username=answer.author.username if answer.author is not None else None,
        created_at=answer.created_at,
        modified_at=answer.modified_at,
        endorser_count=endorser_count,
    )


def _question_to_summary(question: Question, answer_count: int, endorser_count: int) -> QuestionSummary:
    return QuestionSummary(
        id=question.id,
        subject=question.subject,
        author_id=question.author_id,
        author_username=question.author.username,
        created_at=question.created_at,
        modified_at=question.modified_at,
        answer_count=answer_count,
        endorser_count=endorser_count,
    )


class QuestionService:
    """Handles question use cases: keyword search, CRUD, answers, endorsements."""

    def __init__(self, question_repo: QuestionRepository, answer_repo: AnswerRepository):
        self.question_repo = question_repo
        self.answer_repo = answer_repo

    async def _require(self, id: int) -> Question:
        question = await self.question_repo.get_by_id(id)
        if question is None:
            raise NotFound("Question", id)
        return question

    async def _detail(self, question: Question, viewer_id: int | None = None) -> QuestionDetail:
        answers = await self.answer_repo.list_for_question(question.id)
        answer_votes = await self.answer_repo.endorser_counts([a.id for a in answers])
        question_votes = await self.question_repo.endorser_counts([question.id])
        endorsed = viewer_id is not None and viewer_id in await self.question_repo.endorser_ids(question.id)
        return QuestionDetail(
            id=question.id,
            subject=question.subject,
            body=question.body,
            author_id=question.author_id,
            author_username=question.author.username,
            created_at=question.created_at,
            modified_at=question.modified_at,
            endorser_count=question_votes.get(question.id, 0),
            endorsed=endorsed,
            answers=[answer_to_response(a, answer_votes.get(a.id, 0)) for a in answers],
        )

    @translate_store_errors
    async def search(self, keyword: str = "", page: int = 0) -> Page[QuestionSummary]:
        """
        Newest-first page of questions whose subject, body, author, or any
        answer's body or author contains the keyword. Each question appears once.
        Pages past the end are empty; negative pages are rejected.
        """
        if page < 0:
            raise InvalidArgument("page must be zero or greater", {"page": page})
        predicate = build_search_predicate(keyword)
        questions, total = await self.question_repo.search_page(
            predicate, offset=page * PAGE_SIZE, limit=PAGE_SIZE
        )
        ids = [q.id for q in questions]
        answer_counts = await self.question_repo.answer_counts(ids)
        endorser_counts = await self.question_repo.endorser_counts(ids)
        logger.debug("search kw=%r page=%d returned %d of %d", keyword, page, len(questions), total)
        return Page[QuestionSummary](
            items=[
                _question_to_summary(q, answer_counts.get(q.id, 0), endorser_counts.get(q.id, 0))
                for q in questions
            ],
            page=page,
            size=PAGE_SIZE,
            total_elements=total,
        )

    @translate_store_errors
    async def get_question(self, id: int, viewer_id: int | None = None) -> QuestionDetail:
        """Question with author, answers, and endorsement count. Raises NotFound.

        `endorsed` tells whether `viewer_id` is among the endorsers; anonymous viewers get False.
        """
        question = await self._require(id)
        return await self._detail(question, viewer_id)

    @translate_store_errors
    async def create(self, data: QuestionCreate, author_id: int) -> QuestionDetail:
        question = Question(
            subject=data.subject,
            body=data.body,
            author_id=author_id,
            created_at=utcnow(),
        )
        question = await self.question_repo.add(question)
        logger.info("Question %d created by user %d", question.id, author_id)
        return await self._detail(question)

    @translate_store_errors
    async def modify(self, id: int, data: QuestionUpdate) -> QuestionDetail:
        question = await self._require(id)
        question.subject = data.subject
        question.body = data.body
        question.modified_at = utcnow()
        question = await self.question_repo.save(question)
        return await self._detail(question)

    @translate_store_errors
    async def delete(self, id: int) -> None:
        """Delete the question together with its answers and endorsements."""
        question = await self._require(id)
        await self.question_repo.delete_thread(question)
        logger.info("Question %d deleted", id)

    @translate_store_errors
    async def endorse(self, id: int, user_id: int) -> None:
        """Add user to the question's endorsers. Repeating the call changes nothing."""
        await self._require(id)
        await self.question_repo.add_endorser(id, user_id)
        logger.info("User %d endorsed question %d", user_id, id)

    @translate_store_errors
    async def add_answer(self, question_id: int, data: AnswerCreate, author_id: int | None) -> AnswerResponse:
        """Attach a new answer to an existing question."""
        question = await self._require(question_id)
        answer = Answer(
            question_id=question.id,
            body=data.body,
            author_id=author_id,
            created_at=utcnow(),
        )
        answer = await self.answer_repo.add(answer)
        logger.info("Answer %d added to question %d", answer.id, question.id)
        return answer_to_response(answer)
