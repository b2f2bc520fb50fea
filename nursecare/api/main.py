"""Main FastAPI application for NurseCare.

This module sets up the FastAPI application with all routes, middleware,
and configuration for the care-management API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nursecare.api.dependencies import get_storage_adapter
from nursecare.api.logging_config import setup_logging
from nursecare.api.middleware import setup_middleware
from nursecare.api.routes import health, notifications, patients, todos
from nursecare.infrastructure.settings import settings

# Configure structured logging
setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"{settings.app_name} API starting up...")
    logger.info("API documentation available at /api/docs")
    logger.info(f"Logging level: {settings.log_level}")
    logger.info(f"JSON logs: {settings.json_logs}")
    yield
    logger.info(f"{settings.app_name} API shutting down...")
    if get_storage_adapter.cache_info().currsize:
        get_storage_adapter().close()


app = FastAPI(
    title=f"{settings.app_name} API",
    description="Patient records, care tasks and reminders for nursing staff",
    version=settings.version,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Process-Time"],
)

setup_middleware(app)

app.include_router(health.router)
app.include_router(patients.router)
app.include_router(todos.router)
app.include_router(notifications.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"{settings.app_name} API",
        "version": settings.version,
        "docs": "/api/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "nursecare.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info"
    )
