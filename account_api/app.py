"""FastAPI application factory and configuration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from . import models  # noqa: F401 - ensure models are registered with SQLModel
from .api import register_routes
from .core import ALLOWED_CORS_ORIGINS, configure_logging, engine
from .core.errors import AccountError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    SQLModel.metadata.create_all(engine)
    yield


async def account_error_handler(request: Request, exc: AccountError) -> Response:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed upstream: "
            f"{type(exc).__name__}: {exc.detail or exc.message}"
        )
    elif exc.detail:
        logger.info(f"{request.method} {request.url.path}: {exc.detail}")

    body = exc.to_body()
    if body is None:
        return Response(status_code=exc.status_code)
    return JSONResponse(body, status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.exception(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse({"error": "Internal server error"}, status_code=500)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Account API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    register_routes(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("account_api.app:app", host="127.0.0.1", port=3000, reload=True)
