"""Demo FastAPI application mounting one file CRUD endpoint."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from filecrud.api.file_router import FileCrud
from filecrud.core.config import Settings, settings
from filecrud.core.exceptions import (
    AppException,
    ConfigurationError,
    app_exception_handler,
)
from filecrud.core.security import bearer_token_step

logger = structlog.get_logger()


def build_file_crud(config: Settings) -> FileCrud:
    """Mount options for the demo endpoint, taken from the environment."""
    options = {
        "storage_root": config.storage.root,
        "base_path": config.storage.base_path,
        "field_name": config.upload.field_name,
        "expect_count": config.upload.expect_count,
        "limit_count": config.upload.limit_count,
        "naming_policy": config.upload.naming_policy,
    }
    if not config.auth.enabled:
        return FileCrud(**options)

    write_gate = bearer_token_step(
        config.auth.secret_key,
        algorithm=config.auth.algorithm,
        roles=config.auth.write_roles_list,
    )
    return FileCrud(**options, post=write_gate, delete="post", move="post")


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded errors."""
    return JSONResponse(
        status_code=429,
        content={
            "status": 429,
            "message": "Rate limit exceeded",
            "code": "RATE_LIMIT_EXCEEDED",
        },
    )


def create_app(config: Settings = settings) -> FastAPI:
    """Build the demo application."""
    prefix = config.storage.normalized_prefix
    if not prefix:
        raise ConfigurationError("FILES_MOUNT_PREFIX must name a non-root path")
    files = build_file_crud(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Starting application",
            app_name=config.app.name,
            environment=config.app.env,
            storage_root=files.config.storage_root,
            mount_prefix=prefix,
            token_gate=config.auth.enabled,
        )
        yield
        logger.info("Shutting down application")

    app = FastAPI(
        title=config.app.name,
        description="File listing, upload, read, move and delete over one storage root",
        version="0.1.0",
        lifespan=lifespan,
        debug=config.app.debug,
    )

    app.state.limiter = Limiter(
        key_func=get_remote_address, default_limits=[config.server.rate_limit]
    )

    # Exception handlers
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Middleware (registration order: inner→outer, execution order: outer→inner)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    app.include_router(files.router, prefix=prefix)
    return app


app = create_app()


def run() -> None:
    """Serve the demo application with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.server.host, port=settings.server.port)
