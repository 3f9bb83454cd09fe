"""
API v1 router - aggregates all endpoint modules.
"""

from fastapi import APIRouter

from qaboard.api.v1.endpoints import answers, health, questions, users

api_router = APIRouter(prefix="/v1")

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(questions.router, prefix="/questions", tags=["questions"])
api_router.include_router(answers.router, prefix="/answers", tags=["answers"])
