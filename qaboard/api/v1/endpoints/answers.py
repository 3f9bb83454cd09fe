"""
Answer endpoints - detail, edit, delete, vote. Creation lives under /questions.
"""

from fastapi import APIRouter, HTTPException, status

from qaboard.core.dependencies import Answers, CurrentUserId
from qaboard.schemas.answer import AnswerResponse, AnswerUpdate

router = APIRouter()


async def _require_author(svc, answer_id: int, user_id: int) -> None:
    answer = await svc.get_answer(answer_id)
    if answer.author_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author may change this answer")


@router.get("/{answer_id}", response_model=AnswerResponse)
async def get_answer(svc: Answers, answer_id: int):
    return await svc.get_answer(answer_id)


@router.put("/{answer_id}", response_model=AnswerResponse)
async def modify_answer(svc: Answers, answer_id: int, data: AnswerUpdate, user_id: CurrentUserId):
    await _require_author(svc, answer_id, user_id)
    return await svc.modify(answer_id, data)


@router.delete("/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(svc: Answers, answer_id: int, user_id: CurrentUserId):
    await _require_author(svc, answer_id, user_id)
    await svc.delete(answer_id)


@router.post("/{answer_id}/vote", response_model=AnswerResponse)
async def vote_answer(svc: Answers, answer_id: int, user_id: CurrentUserId):
    await svc.endorse(answer_id, user_id)
    return await svc.get_answer(answer_id)
