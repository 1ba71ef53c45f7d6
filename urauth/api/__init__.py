# HTTP API routers
from .routes_admin import router as admin_router
from .routes_claims import router as claims_router
from .routes_public import router as public_router
from .deps import get_registry, status_for, urauth_error_handler

__all__ = [
    "admin_router",
    "claims_router",
    "public_router",
    "get_registry",
    "status_for",
    "urauth_error_handler",
]
