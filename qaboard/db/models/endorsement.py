"""
Endorsement association tables.
Composite primary keys make each (target, user) pair a set member: a second
insert of the same pair never adds a row.
"""

from sqlalchemy import Column, ForeignKey, Table

from qaboard.db.base import Base

question_voter = Table(
    "question_voter",
    Base.metadata,
    Column("question_id", ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)

answer_voter = Table(
    "answer_voter",
    Base.metadata,
    Column("answer_id", ForeignKey("answers.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)
