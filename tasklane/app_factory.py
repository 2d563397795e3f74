"""
FastAPI application factory for TaskLane.

Creates and configures the FastAPI application with middleware, exception
handlers, routers and startup logic.
"""

import logging
import uuid as uuid_lib
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, Request

from tasklane.config import TaskLaneSettings, get_settings
from tasklane.db import ensure_schema
from tasklane.errors.responses import register_exception_handlers
from tasklane.structured_logger import request_id_ctx, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates the database schema on startup.
    """
    # ===== STARTUP =====
    settings: TaskLaneSettings = app.state.settings
    ensure_schema(settings.app_db)
    logger.info(f"TaskLane API started ({settings.environment}), database at {settings.app_db}")

    yield

    # ===== SHUTDOWN =====
    logger.info("TaskLane API shutting down...")


def register_routers(app: FastAPI) -> List[str]:
    """
    Register all API routers to the FastAPI app.

    Returns:
        Names of the registered routers
    """
    from tasklane.routes import lists, namespaces, permissions, shares, tasks, teams

    loaded = []
    for module in (namespaces, lists, tasks, shares, teams, permissions):
        app.include_router(module.router)
        loaded.append(module.__name__.rsplit(".", 1)[-1])
    return loaded


def create_app(settings: Optional[TaskLaneSettings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application for TaskLane.

    This factory function encapsulates:
    - App instantiation
    - Logging setup
    - Exception handlers turning TaskLane errors into ErrorResponse bodies
    - Request ID tracking middleware
    - Router registration

    Args:
        settings: Settings to use; defaults to get_settings()

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, structured=settings.structured_logs)

    app = FastAPI(
        title="TaskLane API",
        description="Multi-tenant task lists with namespace, team, user and link sharing.",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.debug and not settings.is_production,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings

    register_exception_handlers(app)

    # Middleware to add request ID to all requests
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """Add unique request ID for tracing and structured logging"""
        request_id = request.headers.get("X-Request-ID", str(uuid_lib.uuid4()))
        request_id_ctx.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    loaded = register_routers(app)
    logger.info(f"Routers: {', '.join(loaded)}")

    return app
