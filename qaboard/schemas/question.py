"""Question request/response schemas - REST API contract."""

from datetime import datetime

from pydantic import BaseModel, Field

from qaboard.schemas.answer import AnswerResponse


class QuestionCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)


class QuestionUpdate(QuestionCreate):
    pass


class QuestionSummary(BaseModel):
    """One row of a search page."""

    id: int
    subject: str
    author_id: int
    author_username: str
    created_at: datetime
    modified_at: datetime | None = None
    answer_count: int = 0
    endorser_count: int = 0


class QuestionDetail(BaseModel):
    id: int
    subject: str
    body: str
    author_id: int
    author_username: str
    created_at: datetime
    modified_at: datetime | None = None
    endorser_count: int = 0
    endorsed: bool = False
    answers: list[AnswerResponse] = []
