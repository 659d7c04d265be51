"""Expose salon records and the stored document model for convenient imports."""

from .document import StoredDocument
from .salon import (
    Client,
    ClientType,
    SalonSettings,
    Service,
    ServiceType,
    UserProfile,
)

__all__ = [
    "Client",
    "ClientType",
    "SalonSettings",
    "Service",
    "ServiceType",
    "StoredDocument",
    "UserProfile",
]
