from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .controller import PostController
from .errors import NotFoundError, PayloadValidationError, PostsError, StoreError
from .log import (
    EVENT_APP_START,
    EVENT_REQUEST_REJECTED,
    EVENT_STORE_CONNECTED,
    EVENT_STORE_DISCONNECTED,
    EVENT_STORE_FAILED,
    log_event,
    setup_logging,
)
from .repositories import Repository, get_repository
from .routers import posts as posts_router
from .settings import Settings, get_settings
from .validation import issues_from_errors

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "posts",
        "description": "CRUD operations for posts with most-recent-first pagination.",
    },
]

_REQUEST_SOURCES = {"body", "query", "path", "header"}


# PUBLIC_INTERFACE
def create_app(repository: Optional[Repository] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The post store is injected (or built from settings) and owned by the app
    lifespan: connected on startup, disconnected on shutdown. The controller
    receives the store at construction and is shared by all requests.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level_value)
    store = repository if repository is not None else get_repository(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log_event(logger, "info", EVENT_APP_START, backend=settings.persistence_backend)
        await store.connect()
        log_event(logger, "info", EVENT_STORE_CONNECTED, store=type(store).__name__)
        app.state.controller = PostController(store)
        try:
            yield
        finally:
            await store.disconnect()
            log_event(logger, "info", EVENT_STORE_DISCONNECTED, store=type(store).__name__)

    app = FastAPI(
        title="Posts Backend",
        description="Backend API service for creating, listing, reading, updating and deleting posts.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[posts_router.LAST_PAGE_HEADER],
    )

    @app.exception_handler(PostsError)
    async def posts_error_handler(request: Request, exc: PostsError) -> Response:
        """
        Render taxonomy errors as {"error", "message", "detail"}; 404 has an empty body.
        """
        operation = f"{request.method} {request.url.path}"
        if isinstance(exc, StoreError):
            log_event(
                logger, "error", EVENT_STORE_FAILED,
                exc_info=exc.cause or exc, operation=operation, detail=exc.detail,
            )
        else:
            log_event(
                logger, "info", EVENT_REQUEST_REJECTED,
                operation=operation, error=exc.error, status=exc.status_code,
            )
        if isinstance(exc, NotFoundError):
            return Response(status_code=exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Framework-level request failures (e.g. malformed JSON) use the same 400
        envelope as payload validation.
        """
        errors = []
        for err in exc.errors():
            loc = tuple(err.get("loc", ()))
            if err.get("type") == "json_invalid":
                loc = ()
            elif loc and loc[0] in _REQUEST_SOURCES:
                loc = loc[1:]
            errors.append({**err, "loc": loc})
        error = PayloadValidationError([i.as_dict() for i in issues_from_errors(errors)])
        return await posts_error_handler(request, error)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(posts_router.router)
    return app


app = create_app()
