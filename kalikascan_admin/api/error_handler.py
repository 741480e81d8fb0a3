import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kalikascan_admin.infrastructure.exceptions import BaseServiceException

logger = logging.getLogger(__name__)


async def service_exception_handler(request: Request, exc: BaseServiceException):
    """Render a service exception as an ``{"error": ...}`` body."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors as bad payloads."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    message = "Invalid payload"
    errors = exc.errors()
    if errors:
        location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
        if location:
            message = f"Invalid payload: {location} {errors[0].get('msg', '')}".strip()
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep framework errors (404 route, 405 method) in the same shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


def add_exception_handlers(app: FastAPI):
    """Add exception handlers to the FastAPI app."""
    app.add_exception_handler(BaseServiceException, service_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
