"""
FastAPI dependencies - identity resolution and service wiring.
Design: Endpoints receive an already-resolved user id and a ready service.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from qaboard.db.session import DbSession
from qaboard.db.repositories import AnswerRepository, QuestionRepository, UserRepository
from qaboard.core.security import decode_access_token
from qaboard.services.answer_service import AnswerService
from qaboard.services.question_service import QuestionService

security = HTTPBearer(auto_error=False)


async def get_current_user_id(
    session: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> int:
    """Resolve JWT to user id. Raises 401 if missing, invalid, or the user is gone."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = decode_access_token(credentials.credentials)
    if not claims or "sub" not in claims:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    user = await UserRepository(session).get_by_id(int(claims["sub"]))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user.id


# Optional auth: anonymous readers get None instead of a 401
async def get_optional_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> int | None:
    """Return user id if a valid token is present, else None."""
    if not credentials:
        return None
    claims = decode_access_token(credentials.credentials)
    if not claims or "sub" not in claims:
        return None
    return int(claims["sub"])


def get_question_service(session: DbSession) -> QuestionService:
    """Factory for service with repository injection."""
    return QuestionService(QuestionRepository(session), AnswerRepository(session))


def get_answer_service(session: DbSession) -> AnswerService:
    return AnswerService(AnswerRepository(session))


CurrentUserId = Annotated[int, Depends(get_current_user_id)]
OptionalUserId = Annotated[int | None, Depends(get_optional_user_id)]
Questions = Annotated[QuestionService, Depends(get_question_service)]
Answers = Annotated[AnswerService, Depends(get_answer_service)]
