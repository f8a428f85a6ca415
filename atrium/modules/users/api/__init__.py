"""
REST API Endpoints

Thin API layer that delegates to services.
"""

from .user_endpoints import router as user_router
from .admin_endpoints import router as admin_router
from .error_handlers import register_exception_handlers

__all__ = [
    "user_router",
    "admin_router",
    "register_exception_handlers",
]
