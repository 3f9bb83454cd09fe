"""
Answer repository - answers of a question and their endorsement rows.
"""

from sqlalchemy import delete, func, select

from qaboard.db.models import Answer, answer_voter
from qaboard.db.repositories.base_repository import BaseRepository


class AnswerRepository(BaseRepository[Answer]):
    def __init__(self, session):
        super().__init__(session, Answer)

    async def list_for_question(self, question_id: int) -> list[Answer]:
        """Answers of one question, oldest first."""
        result = await self.session.execute(
            select(Answer)
            .where(Answer.question_id == question_id)
            .order_by(Answer.created_at, Answer.id)
        )
        return list(result.unique().scalars().all())

    async def endorser_counts(self, answer_ids: list[int]) -> dict[int, int]:
        if not answer_ids:
            return {}
        result = await self.session.execute(
            select(answer_voter.c.answer_id, func.count())
            .where(answer_voter.c.answer_id.in_(answer_ids))
            .group_by(answer_voter.c.answer_id)
        )
        return {answer_id: count for answer_id, count in result.all()}

    async def add_endorser(self, answer_id: int, user_id: int) -> None:
        await self.add_member(answer_voter, answer_id=answer_id, user_id=user_id)

    async def delete_with_votes(self, answer: Answer) -> None:
        await self.session.execute(delete(answer_voter).where(answer_voter.c.answer_id == answer.id))
        await self.delete(answer)
