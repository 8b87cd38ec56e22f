import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.errors import register_error_handlers
from src.app_shell.config import AppConfig, ConfigError, Settings, load_app_config
from src.app_shell.context import ServiceContext
from src.app_shell.logging_config import RequestLoggingMiddleware, configure_logging

logger = logging.getLogger(__name__)


def install_context(app: FastAPI, ctx: ServiceContext) -> None:
    """Attach the service context and, for local storage, serve stored files."""
    app.state.ctx = ctx
    storage = ctx.config.storage
    if storage.backend == "local":
        storage.local_dir.mkdir(parents=True, exist_ok=True)
        app.mount(
            storage.public_prefix,
            StaticFiles(directory=storage.local_dir),
            name="uploads",
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    if getattr(app.state, "ctx", None) is None:
        # Load config and validate on startup (fail-fast)
        try:
            config = load_app_config()
        except (ConfigError, FileNotFoundError, ValueError) as e:
            logger.critical("Configuration load failed: %s", e)
            sys.exit(1)
        configure_logging(config.log_level)
        install_context(app, ServiceContext.create(config))
        logger.info(
            "Started (env=%s, storage=%s)", config.env, config.storage.backend
        )

    yield

    close = getattr(app.state.ctx.media_storage, "close", None)
    if close is not None:
        close()


def create_app(
    config: AppConfig | None = None,
    *,
    context: ServiceContext | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Clinic Site API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.ctx = None

    if context is None and config is not None:
        context = ServiceContext.create(config)
    if context is not None:
        install_context(app, context)

    register_error_handlers(app)

    # --- Routers ---
    from src.api.routes import auth, uploads

    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(uploads.router, prefix="/api", tags=["Uploads"])

    origins = list(context.config.cors_origins) if context else Settings().cors_origins
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "service": "api"}

    return app


app = create_app()
