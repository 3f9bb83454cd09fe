"""
Domain errors raised by the service layer.
Design: The HTTP layer maps each class to a status code; services never return
placeholders in place of raising.
"""

import functools
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class BoardError(Exception):
    """Base exception for board operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(BoardError):
    """No record exists for the requested identifier."""

    def __init__(self, entity: str, identifier: Any):
        super().__init__(
            f"{entity} not found",
            {"entity": entity, "id": identifier},
        )
        self.entity = entity
        self.identifier = identifier


class InvalidArgument(BoardError):
    """Caller passed a value outside the operation's contract."""


class StoreUnavailable(BoardError):
    """The database could not be reached or rejected the transaction."""


def translate_store_errors(func):
    """Re-raise SQLAlchemy failures from an async service call as StoreUnavailable."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.warning("%s failed against the store: %s", func.__qualname__, exc)
            raise StoreUnavailable(
                "Store unavailable", {"operation": func.__qualname__}
            ) from exc

    return wrapper
