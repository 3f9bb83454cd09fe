"""
FastAPI application entry point.
Mounts routes and the Prometheus metrics app, maps domain errors to responses,
and creates missing tables on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.exc import SQLAlchemyError

from qaboard.config import get_settings
from qaboard.core.exceptions import InvalidArgument, NotFound, StoreUnavailable
from qaboard.api.v1.router import api_router
from qaboard.db.session import init_models
from qaboard.logging_setup import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables. A store that is down is reported by /health/ready."""
    try:
        await init_models()
    except SQLAlchemyError as exc:
        logger.warning("Could not initialise tables at startup: %s", exc)
    yield


def _error_body(exc) -> dict:
    return {"detail": exc.message, **exc.details}


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_body(exc))


async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(exc))


async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("%s %s: %s", request.method, request.url.path, exc.__cause__ or exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": exc.message})


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        description="Question/answer board with keyword search and endorsements.",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(InvalidArgument, invalid_argument_handler)
    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)

    # Prometheus metrics at /metrics
    app.mount("/metrics", make_asgi_app())

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
