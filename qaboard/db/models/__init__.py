from qaboard.db.models.user import User
from qaboard.db.models.question import Question
from qaboard.db.models.answer import Answer
from qaboard.db.models.endorsement import question_voter, answer_voter

__all__ = ["User", "Question", "Answer", "question_voter", "answer_voter"]
