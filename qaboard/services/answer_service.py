"""
Answer service - lookup, edit, delete, and endorsement of single answers.
Answers are created through QuestionService.add_answer.
"""

import logging

from qaboard.core.exceptions import NotFound, translate_store_errors
from qaboard.db.base import utcnow
from qaboard.db.models import Answer
from qaboard.db.repositories.answer_repository import AnswerRepository
from qaboard.schemas.answer import AnswerResponse, AnswerUpdate
from qaboard.services.question_service import answer_to_response

logger = logging.getLogger(__name__)


class AnswerService:
    def __init__(self, answer_repo: AnswerRepository):
        self.answer_repo = answer_repo

    async def _require(self, id: int) -> Answer:
        answer = await self.answer_repo.get_by_id(id)
        if answer is None:
            raise NotFound("Answer", id)
        return answer

    async def _response(self, answer: Answer) -> AnswerResponse:
        votes = await self.answer_repo.endorser_counts([answer.id])
        return answer_to_response(answer, votes.get(answer.id, 0))

    @translate_store_errors
    async def get_answer(self, id: int) -> AnswerResponse:
        """Answer with author and parent question id. Raises NotFound."""
        return await self._response(await self._require(id))

    @translate_store_errors
    async def modify(self, id: int, data: AnswerUpdate) -> AnswerResponse:
        answer = await self._require(id)
        answer.body = data.body
        answer.modified_at = utcnow()
        answer = await self.answer_repo.save(answer)
        return await self._response(answer)

    @translate_store_errors
    async def delete(self, id: int) -> int:
        """Delete the answer; returns the parent question id."""
        answer = await self._require(id)
        question_id = answer.question_id
        await self.answer_repo.delete_with_votes(answer)
        logger.info("Answer %d deleted from question %d", id, question_id)
        return question_id

    @translate_store_errors
    async def endorse(self, id: int, user_id: int) -> None:
        await self._require(id)
        await self.answer_repo.add_endorser(id, user_id)
        logger.info("User %d endorsed answer %d", user_id, id)
