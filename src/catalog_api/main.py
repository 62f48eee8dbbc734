from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .logging_config import setup_logging
from .repositories import get_repositories
from .routers import products as products_router
from .routers import tasks as tasks_router
from .services import ProductService, TaskService
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "products",
        "description": "CRUD operations for inventory products plus name, category and stock queries.",
    },
    {
        "name": "tasks",
        "description": "CRUD operations for tasks plus completion changes.",
    },
]


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors.

    Response format:
        {
            "error": "ValidationError",
            "detail": [... pydantic/fastapi error details ...],
            "message": "Request validation failed"
        }
    """
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


async def storage_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    """
    Storage failures pass through the services untouched; this is where they
    become a 500 response.
    """
    logger.exception("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "StorageError", "message": "Storage operation failed"},
    )


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application with its own repositories and services.

    Args:
        settings: Explicit settings; loaded from the environment when omitted.

    Returns:
        A configured FastAPI instance.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Catalog Backend",
        description="Backend API service for managing products and tasks with pluggable storage backends.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )

    product_repo, task_repo = get_repositories(settings)
    app.state.settings = settings
    app.state.product_service = ProductService(product_repo)
    app.state.task_service = TaskService(task_repo)

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(sqlite3.Error, storage_exception_handler)  # type: ignore[arg-type]

    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(products_router.router)
    app.include_router(tasks_router.router)
    return app


app = create_app()
