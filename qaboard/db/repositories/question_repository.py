"""
Question repository - keyword search, endorsement rows, and thread deletion.
Challenge: One distinct, ordered, windowed SELECT per page; counts that ignore
join fan-out.
"""

from sqlalchemy import delete, func, select

from qaboard.db.models import Answer, Question, answer_voter, question_voter
from qaboard.db.repositories.base_repository import BaseRepository
from qaboard.search.predicate import SearchPredicate
from qaboard.search.sql import CompiledSearch


class QuestionRepository(BaseRepository[Question]):
    """Question-specific queries. Author is eager-loaded by the mapping."""

    def __init__(self, session):
        super().__init__(session, Question)

    async def search_page(
        self, predicate: SearchPredicate, offset: int, limit: int
    ) -> tuple[list[Question], int]:
        """Newest-first window of distinct matching questions, plus the distinct match count."""
        compiled = CompiledSearch(predicate)
        total = (await self.session.execute(compiled.count())).scalar_one()
        # Past the last match: nothing to fetch, and huge offsets overflow driver integers
        if offset >= total:
            return [], total
        result = await self.session.execute(
            compiled.rows()
            .order_by(Question.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.unique().scalars().all()), total

    async def answer_counts(self, question_ids: list[int]) -> dict[int, int]:
        if not question_ids:
            return {}
        result = await self.session.execute(
            select(Answer.question_id, func.count(Answer.id))
            .where(Answer.question_id.in_(question_ids))
            .group_by(Answer.question_id)
        )
        return {question_id: count for question_id, count in result.all()}

    async def endorser_counts(self, question_ids: list[int]) -> dict[int, int]:
        if not question_ids:
            return {}
        result = await self.session.execute(
            select(question_voter.c.question_id, func.count())
            .where(question_voter.c.question_id.in_(question_ids))
            .group_by(question_voter.c.question_id)
        )
        return {question_id: count for question_id, count in result.all()}

    async def endorser_ids(self, question_id: int) -> set[int]:
        result = await self.session.execute(
            select(question_voter.c.user_id).where(question_voter.c.question_id == question_id)
        )
        return set(result.scalars().all())

    async def add_endorser(self, question_id: int, user_id: int) -> None:
        await self.add_member(question_voter, question_id=question_id, user_id=user_id)

    async def delete_thread(self, question: Question) -> None:
        """Delete a question with its answers and all their endorsement rows."""
        answer_ids = select(Answer.id).where(Answer.question_id == question.id)
        await self.session.execute(delete(answer_voter).where(answer_voter.c.answer_id.in_(answer_ids)))
        await self.session.execute(
            delete(Answer).where(Answer.question_id == question.id).execution_options(synchronize_session="fetch")
        )
        await self.session.execute(delete(question_voter).where(question_voter.c.question_id == question.id))
        await self.delete(question)
