"""Routers package."""

from .auth import router as auth_router
from .client_services import router as client_services_router
from .clients import router as clients_router
from .data_management import router as data_management_router
from .settings import router as settings_router

__all__ = [
    "auth_router",
    "client_services_router",
    "clients_router",
    "data_management_router",
    "settings_router",
]
