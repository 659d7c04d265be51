"""Validation and document mapping for salon records.

Serialisation builds the exact field set stored for each collection. Absent
optional values are written as ``None`` explicitly instead of being pruned.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date, datetime, timezone
from numbers import Number
from typing import Any, Optional

from .. import models
from .gateway import (
    CLIENTS_COLLECTION,
    SERVICES_COLLECTION,
    PersistenceGateway,
)

DIGITS_PATTERN = re.compile(r"^[0-9]+$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TEMPORARY_ID_PREFIX = "temp_"

CLIENT_TYPES = {client_type.value for client_type in models.ClientType}
SERVICE_TYPES = {service_type.value for service_type in models.ServiceType}


class RecordValidationError(ValueError):
    """Raised when a record payload is rejected before reaching the store."""


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped or None


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _is_persisted(record_id: Optional[str]) -> bool:
    return bool(record_id) and not str(record_id).startswith(TEMPORARY_ID_PREFIX)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_iso_date(value: Any) -> bool:
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


async def validate_client(client: models.Client, gateway: PersistenceGateway) -> None:
    if not (client.name or "").strip():
        raise RecordValidationError("Client name is required")
    if not client.type:
        raise RecordValidationError("Client type is required")
    if _enum_value(client.type) not in CLIENT_TYPES:
        raise RecordValidationError("Invalid client type")
    if _is_persisted(client.id) and not await gateway.exists(CLIENTS_COLLECTION, client.id):
        raise RecordValidationError("Client not found")


async def validate_service(service: models.Service, gateway: PersistenceGateway) -> None:
    if not service.client_id or not service.types or not service.date:
        raise RecordValidationError("All required fields must be filled in")
    if not _is_iso_date(service.date):
        raise RecordValidationError("Invalid date")
    if not _is_number(service.price) or service.price < 0:
        raise RecordValidationError("Price must be a positive number")
    if service.duration is not None and (
        not _is_number(service.duration) or service.duration < 0
    ):
        raise RecordValidationError("Duration must be a positive number")
    if not all(_enum_value(service_type) in SERVICE_TYPES for service_type in service.types):
        raise RecordValidationError("Invalid service types")
    if _is_persisted(service.id) and not await gateway.exists(SERVICES_COLLECTION, service.id):
        raise RecordValidationError("Service not found")


def validate_settings(settings: models.SalonSettings) -> None:
    if not (settings.name or "").strip():
        raise RecordValidationError("Salon name is required")
    phone = (settings.phone or "").strip()
    if phone and not DIGITS_PATTERN.match(phone):
        raise RecordValidationError("Phone number must only contain digits")
    postal_code = (settings.postal_code or "").strip()
    if postal_code and not DIGITS_PATTERN.match(postal_code):
        raise RecordValidationError("Postal code must only contain digits")


def serialize_client(client: models.Client, user_id: str) -> dict[str, Any]:
    now = utc_timestamp()
    return {
        "user_id": user_id,
        "name": client.name.strip(),
        "type": _enum_value(client.type),
        "notes": _strip_or_none(client.notes),
        "last_visit": client.last_visit or None,
        "is_favorite": bool(client.is_favorite),
        "created_at": client.created_at or now,
        "updated_at": now,
    }


def serialize_service(service: models.Service, user_id: str) -> dict[str, Any]:
    now = utc_timestamp()
    return {
        "user_id": user_id,
        "client_id": service.client_id,
        "types": [_enum_value(service_type) for service_type in service.types],
        "products": _strip_or_none(service.products),
        "price": float(service.price),
        "duration": int(service.duration) if service.duration is not None else None,
        "date": service.date,
        "notes": _strip_or_none(service.notes),
        "created_at": service.created_at or now,
        "updated_at": now,
    }


def serialize_settings(settings: models.SalonSettings, user_id: str) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "name": settings.name.strip(),
        "address": (settings.address or "").strip(),
        "city": (settings.city or "").strip(),
        "postal_code": (settings.postal_code or "").strip(),
        "phone": (settings.phone or "").strip(),
        "updated_at": utc_timestamp(),
    }


def default_settings(user_id: str) -> models.SalonSettings:
    return models.SalonSettings(name="MonSalon", user_id=user_id, updated_at=utc_timestamp())


def client_from_document(document: dict[str, Any]) -> models.Client:
    return models.Client(
        id=document.get("id"),
        user_id=document.get("user_id"),
        name=document.get("name") or "",
        type=_coerce_client_type(document.get("type")),
        notes=document.get("notes"),
        last_visit=document.get("last_visit") or "",
        is_favorite=bool(document.get("is_favorite")),
        created_at=document.get("created_at"),
        updated_at=document.get("updated_at"),
    )


def service_from_document(document: dict[str, Any]) -> models.Service:
    duration = document.get("duration")
    return models.Service(
        id=document.get("id"),
        user_id=document.get("user_id"),
        client_id=document.get("client_id") or "",
        types=[_coerce_service_type(value) for value in document.get("types") or []],
        products=document.get("products"),
        price=float(document.get("price") or 0),
        duration=int(duration) if duration is not None else None,
        date=document.get("date") or "",
        notes=document.get("notes"),
        created_at=document.get("created_at"),
        updated_at=document.get("updated_at"),
    )


def settings_from_document(document: dict[str, Any]) -> models.SalonSettings:
    return models.SalonSettings(
        id=document.get("id"),
        user_id=document.get("user_id"),
        name=document.get("name") or "",
        address=document.get("address") or "",
        city=document.get("city") or "",
        postal_code=document.get("postal_code") or "",
        phone=document.get("phone") or "",
        updated_at=document.get("updated_at"),
    )


def apply_document(record, document: dict[str, Any]):
    """Return ``record`` with the stored field values of ``document``."""

    fields = {key: value for key, value in document.items() if hasattr(record, key)}
    if "last_visit" in fields:
        fields["last_visit"] = fields["last_visit"] or ""
    if "type" in fields:
        fields["type"] = _coerce_client_type(fields["type"])
    if "types" in fields:
        fields["types"] = [_coerce_service_type(value) for value in fields["types"]]
    return replace(record, **fields)


def _coerce_client_type(value: Any) -> Any:
    try:
        return models.ClientType(value)
    except ValueError:
        return value


def _coerce_service_type(value: Any) -> Any:
    try:
        return models.ServiceType(value)
    except ValueError:
        return value
