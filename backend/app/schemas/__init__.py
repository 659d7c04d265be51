"""Expose Pydantic schemas for convenient imports."""

from .auth import LogoutResponse, UserRead
from .client import ClientBase, ClientCreate, ClientDetail, ClientRead, ClientUpdate
from .data_management import ImportRequest, ImportStatusRead
from .service import ServiceBase, ServiceCreate, ServiceRead, ServiceUpdate
from .settings import SettingsRead, SettingsUpdate

__all__ = [
    "ClientBase",
    "ClientCreate",
    "ClientDetail",
    "ClientRead",
    "ClientUpdate",
    "ImportRequest",
    "ImportStatusRead",
    "LogoutResponse",
    "ServiceBase",
    "ServiceCreate",
    "ServiceRead",
    "ServiceUpdate",
    "SettingsRead",
    "SettingsUpdate",
    "UserRead",
]
