"""
FastAPI dependencies: ID token verification, role checks and service lookup.
"""
import functools
import inspect
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, Request
from firebase_admin import auth

from kalikascan_admin.infrastructure import get_service_factory as factory_getter
from kalikascan_admin.infrastructure.exceptions import (
    AuthenticationError,
    BaseServiceException,
    OperationError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

# Errors firebase_admin raises for tokens it will not accept
TOKEN_ERRORS = (
    ValueError,
    auth.InvalidIdTokenError,
    auth.UserDisabledError,
    auth.CertificateFetchError,
)


async def get_service_factory(request: Request) -> Any:
    return factory_getter()


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization") or ""
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


def require_user(request: Request, factory=Depends(get_service_factory)) -> Dict[str, Any]:
    """
    Verify the bearer ID token.

    Returns:
        The decoded token (uid and custom claims)

    Raises:
        AuthenticationError: No token, or Firebase rejected it
    """
    token = bearer_token(request)
    if not token:
        raise AuthenticationError("Missing token")

    try:
        decoded = factory.create_auth_client().verify_id_token(token)
    except TOKEN_ERRORS as e:
        logger.info(f"Rejected ID token on {request.url.path}: {e}")
        raise AuthenticationError("Invalid token")

    request.state.uid = decoded.get("uid")
    return decoded


async def require_admin(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    if not user.get("admin"):
        raise PermissionDeniedError("Forbidden (not admin)", required_claim="admin")
    return user


async def require_superadmin(user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    if not user.get("superadmin"):
        raise PermissionDeniedError("Forbidden", required_claim="superadmin")
    return user


def service_provider(method_name: str) -> Callable:
    """Build a dependency returning ``factory.<method_name>()``."""
    async def provide(factory=Depends(get_service_factory)):
        return getattr(factory, method_name)()

    provide.__name__ = f"get_{method_name.replace('create_', '')}"
    return provide


get_plant_scan_service = service_provider("create_plant_scan_service")
get_map_post_service = service_provider("create_map_post_service")
get_health_assessment_service = service_provider("create_health_assessment_service")
get_expert_application_service = service_provider("create_expert_application_service")
get_admin_account_service = service_provider("create_admin_account_service")
get_analytics_service = service_provider("create_analytics_service")
get_notification_service = service_provider("create_notification_service")
get_geocode_service = service_provider("create_geocode_service")
get_profile_photo_service = service_provider("create_profile_photo_service")
get_report_service = service_provider("create_report_service")


def handle_exceptions(func: Callable) -> Callable:
    """
    Decorator for route handlers.

    Service exceptions and HTTP exceptions propagate to the app handlers,
    anything else is logged and turned into a 500. Plain ``def`` handlers
    stay synchronous so FastAPI runs them in its threadpool.
    """
    def translate(exc: Exception) -> OperationError:
        logger.error(f"Unexpected error in {func.__name__}: {str(exc)}", exc_info=True)
        return OperationError(message=str(exc) or "Server error", operation=func.__name__)

    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except (BaseServiceException, HTTPException):
                raise
            except Exception as exc:
                raise translate(exc)

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (BaseServiceException, HTTPException):
            raise
        except Exception as exc:
            raise translate(exc)

    return wrapper
