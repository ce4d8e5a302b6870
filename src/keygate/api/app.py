"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from keygate.api.middleware import (
    ApiKeyAuthenticationMiddleware,
    RequestLoggingMiddleware,
)
from keygate.api.routes.auth import router as auth_router
from keygate.auth.adjudicator import ApiKeyAdjudicator
from keygate.auth.hashing import HashingService
from keygate.auth.verifier import CredentialVerifier
from keygate.config import settings
from keygate.logging_config import configure_logging
from keygate.storage.credential_store import SqlCredentialStore
from keygate.storage.database import async_session, engine

logger = structlog.get_logger()


def create_adjudicator() -> ApiKeyAdjudicator:
    """Wire hashing, store and verifier into the API key adjudicator.

    Raises:
        ConfigurationFault: if the configured hash algorithm is unavailable.
    """
    hasher = HashingService(settings.api_key_hash_algorithm)
    store = SqlCredentialStore(async_session, hasher)
    return ApiKeyAdjudicator(CredentialVerifier(hasher, store))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown.

    Shutdown:
        - Dispose database engine (close connection pool).
    """
    configure_logging(
        environment=str(settings.environment),
        log_level=settings.log_level,
    )
    logger.info("app_started", environment=str(settings.environment))
    yield

    await engine.dispose()
    logger.info("app_stopped")


app = FastAPI(
    title="Keygate",
    description="API key authentication service",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.is_dev,
)

# Built at import time so a bad hash algorithm stops the process.
app.state.adjudicator = create_adjudicator()

app.add_middleware(
    ApiKeyAuthenticationMiddleware,
    header_name=settings.api_key_header,
    login_method=settings.api_key_login_method,
    login_path=settings.api_key_login_path,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness check; does not touch the database."""
    return {"status": "ok"}


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Catch-all handler for unhandled exceptions."""
    logger.error("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(auth_router)
