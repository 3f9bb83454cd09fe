# Repository pattern: data access kept out of the services

from qaboard.db.repositories.answer_repository import AnswerRepository
from qaboard.db.repositories.question_repository import QuestionRepository
from qaboard.db.repositories.user_repository import UserRepository

__all__ = ["UserRepository", "QuestionRepository", "AnswerRepository"]
