"""
Question endpoints - search, thread CRUD, answers, and votes.
Design: Thin controller; NotFound / InvalidArgument / StoreUnavailable are
mapped to responses by the application's exception handlers.
"""

from fastapi import APIRouter, HTTPException, status, Query

from qaboard.core.dependencies import CurrentUserId, OptionalUserId, Questions
from qaboard.schemas.answer import AnswerCreate, AnswerResponse
from qaboard.schemas.page import Page
from qaboard.schemas.question import QuestionCreate, QuestionDetail, QuestionSummary, QuestionUpdate

router = APIRouter()


async def _require_author(svc, question_id: int, user_id: int) -> None:
    question = await svc.get_question(question_id)
    if question.author_id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author may change this question")


@router.get("", response_model=Page[QuestionSummary])
async def list_questions(
    svc: Questions,
    kw: str = Query(""),
    page: int = Query(0),
):
    """Search questions. REST: GET /questions?kw=go&page=0 (empty kw lists all)."""
    return await svc.search(kw, page)


@router.get("/{question_id}", response_model=QuestionDetail)
async def get_question(svc: Questions, question_id: int, viewer_id: OptionalUserId):
    """Question thread. `endorsed` reflects the caller when a valid token is sent."""
    return await svc.get_question(question_id, viewer_id)


@router.post("", response_model=QuestionDetail, status_code=status.HTTP_201_CREATED)
async def create_question(svc: Questions, data: QuestionCreate, user_id: CurrentUserId):
    """Create question (authenticated). Author comes from the token."""
    return await svc.create(data, author_id=user_id)


@router.put("/{question_id}", response_model=QuestionDetail)
async def modify_question(svc: Questions, question_id: int, data: QuestionUpdate, user_id: CurrentUserId):
    await _require_author(svc, question_id, user_id)
    return await svc.modify(question_id, data)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(svc: Questions, question_id: int, user_id: CurrentUserId):
    """Delete question with its answers."""
    await _require_author(svc, question_id, user_id)
    await svc.delete(question_id)


@router.post("/{question_id}/vote", response_model=QuestionDetail)
async def vote_question(svc: Questions, question_id: int, user_id: CurrentUserId):
    """Endorse question. Voting again leaves the count unchanged."""
    await svc.endorse(question_id, user_id)
    return await svc.get_question(question_id, user_id)


@router.post("/{question_id}/answers", response_model=AnswerResponse, status_code=status.HTTP_201_CREATED)
async def create_answer(svc: Questions, question_id: int, data: AnswerCreate, user_id: CurrentUserId):
    return await svc.add_answer(question_id, data, author_id=user_id)
