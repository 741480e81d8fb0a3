"""
Entry point of the KalikaScan Admin Service.
"""
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from kalikascan_admin.api.error_handler import add_exception_handlers
from kalikascan_admin.api.routes import register_routes
from kalikascan_admin.infrastructure import get_service_factory
from kalikascan_admin.infrastructure.config import settings
from kalikascan_admin.infrastructure.database.connections import init_database_connections
from kalikascan_admin.infrastructure.logging import setup_logging
from kalikascan_admin.infrastructure.middlewares import RequestLoggingMiddleware

setup_logging()
logger = logging.getLogger(__name__)

VERSION = settings.APP_VERSION
ENV = settings.ENVIRONMENT


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown of the application."""
    logger.info("Application starting up")

    await init_database_connections()

    factory = get_service_factory()
    factory.init_all_services()

    yield

    logger.info("Application shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
    Administrative API for the KalikaScan plant identification app.

    ## Features

    * Admin accounts gated by Firebase Auth custom claims
    * Plant scans, map posts and health assessments: list, delete, fix addresses
    * Expert application review
    * Analytics counters, disease trends and notification badges
    * CSV exports of every listing and of the dashboard

    ## Integrations

    * Firebase Auth and Firestore
    * Cloudinary (profile photos)
    * Plant.id (identification cleanup)
    * Nominatim (reverse geocoding)
    """,
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware, slow_request_threshold=settings.SLOW_REQUEST_THRESHOLD)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials="*" not in settings.ALLOWED_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)

add_exception_handlers(app)
register_routes(app)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema["info"]["x-api-version"] = VERSION
    openapi_schema["info"]["x-environment"] = ENV

    openapi_schema["tags"] = [
        {"name": "admins", "description": "Admin account management"},
        {"name": "plant scans", "description": "Plant identification records"},
        {"name": "map posts", "description": "Community map posts and their comments"},
        {"name": "health assessments", "description": "Plant health assessment records"},
        {"name": "expert applications", "description": "Applications for the expert role"},
        {"name": "analytics", "description": "Counters, daily activity and disease trends"},
        {"name": "notifications", "description": "New record badges"},
        {"name": "geocoding", "description": "Reverse geocoding"},
        {"name": "profile", "description": "Signed-in user profile"},
        {"name": "system", "description": "Service status"},
    ]

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.get("/version", tags=["system"])
async def get_version():
    """Version information of the API."""
    return {
        "version": VERSION,
        "environment": ENV,
        "build_date": os.getenv("BUILD_DATE", "unknown"),
        "commit_hash": os.getenv("COMMIT_HASH", "unknown")
    }


@app.get("/", tags=["system"])
async def root():
    return {
        "service": settings.APP_NAME,
        "status": "running",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", tags=["system"])
def health_check():
    """Check that Firestore answers."""
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        factory = get_service_factory()
        reconciler = factory.create_counter_reconciler()
        factory.create_firestore_client().get_data(reconciler.global_ref())
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": timestamp,
                "error": str(e)
            }
        )

    return {
        "status": "healthy",
        "timestamp": timestamp,
        "version": VERSION,
        "connections": {"firestore": "ok"}
    }


def start():
    logger.info(f"Starting server at http://{settings.API_HOST}:{settings.API_PORT}")
    uvicorn.run(
        "kalikascan_admin.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    start()
