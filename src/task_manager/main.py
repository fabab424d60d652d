from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import TaskStoreError
from .logging_setup import setup_logging
from .routers import edit_session as edit_session_router
from .routers import tasks as tasks_router
from .routers import view as view_router
from .settings import Settings, get_settings
from .store import TaskStore
from .utils import error_envelope

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "tasks", "description": "Add, toggle, delete and clear tasks."},
    {"name": "edit-session", "description": "Begin, update, commit and cancel the single task rename session."},
    {"name": "view", "description": "Filtered view, counts, filter selection and snapshot export."},
]


# PUBLIC_INTERFACE
def create_app(store: Optional[TaskStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application around a single in-memory TaskStore.

    Logging is set up by the lifespan hook when the server starts.

    Args:
        store: Store to serve; a fresh empty store is created when omitted.
        settings: Settings to use; loaded from the environment when omitted.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Logging is configured when the server starts, not when this module is imported.
        setup_logging(settings.log_level)
        logger.info("Task Manager starting filter=%s", app.state.store.filter.value)
        yield

    app = FastAPI(
        title="Task Manager",
        description="Single-user in-memory task list: add, rename, complete, delete and filter tasks.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else TaskStore(initial_filter=settings.default_filter)

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TaskStoreError)
    async def task_store_exception_handler(request: Request, exc: TaskStoreError) -> JSONResponse:
        """
        Render a rejected store command as:
            {"error": "<code>", "message": "...", "detail": ...}
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(exc.code, exc.message, exc.detail),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Request bodies that fail schema validation use the same envelope."""
        return JSONResponse(
            status_code=422,
            content=error_envelope("ValidationError", "Request validation failed", exc.errors()),
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the current task count.
        """
        return {"message": "Healthy", "tasks": app.state.store.counts().total}

    app.include_router(tasks_router.router)
    app.include_router(edit_session_router.router)
    app.include_router(view_router.router)

    logger.info("Task Manager app created filter=%s", app.state.store.filter.value)
    return app


app = create_app()
