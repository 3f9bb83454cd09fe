"""
Question model - root of a thread and the entity returned by search.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, Text, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qaboard.db.base import Base, utcnow

if TYPE_CHECKING:
    from qaboard.db.models.user import User


class Question(Base):
    """
    Question entity. Answers are looked up by question_id and endorsers live in
    question_voter, so neither is mapped as a collection here.
    """

    __tablename__ = "questions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    modified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Many-to-one, loaded with every question row so callers never hit a lazy load
    author: Mapped["User"] = relationship("User", lazy="joined", innerjoin=True)

    def __repr__(self) -> str:
        return f"<Question(id={self.id}, subject={self.subject})>"
