"""Answer request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class AnswerCreate(BaseModel):
    body: str = Field(..., min_length=1)


class AnswerUpdate(AnswerCreate):
    pass


class AnswerResponse(BaseModel):
    id: int
    question_id: int
    body: str
    author_id: int | None = None
    author_username: str | None = None  # Populated by service layer
    created_at: datetime
    modified_at: datetime | None = None
    endorser_count: int = 0
