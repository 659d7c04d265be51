"""CSV import and export of clients and services."""

from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from .. import models
from .csv_parser import CSVField, ParseResult, parse_csv
from .records import CLIENT_TYPES, SERVICE_TYPES
from .store import SalonStore

LOGGER = logging.getLogger(__name__)

CLIENT_EXPORT_HEADERS = ["id", "nom", "type", "notes", "derniere_visite", "favori"]
SERVICE_EXPORT_HEADERS = [
    "id",
    "client_id",
    "types",
    "prix",
    "date",
    "duree",
    "produits",
    "notes",
]


def _split_types(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_client_type(value: str) -> bool:
    return value in CLIENT_TYPES


def _are_service_types(value: str) -> bool:
    types = _split_types(value)
    return bool(types) and all(item in SERVICE_TYPES for item in types)


def _is_number(value: str) -> bool:
    try:
        number = float(value.replace(",", "."))
    except ValueError:
        return False
    return math.isfinite(number)


def _to_price(value: str) -> float:
    return float(value.replace(",", "."))


def _to_duration(value: str) -> Optional[int]:
    if not value:
        return None
    return int(float(value.replace(",", ".")))


CLIENT_IMPORT_FIELDS = [
    CSVField(header="nom", key="name", required=True),
    CSVField(header="type", key="type", required=True, validate=_is_client_type),
    CSVField(header="notes", key="notes"),
]

SERVICE_IMPORT_FIELDS = [
    CSVField(header="client_id", key="client_id", required=True),
    CSVField(
        header="types",
        key="types",
        required=True,
        validate=_are_service_types,
        transform=_split_types,
    ),
    CSVField(header="prix", key="price", required=True, validate=_is_number, transform=_to_price),
    CSVField(header="date", key="date", required=True),
    CSVField(header="duree", key="duration", validate=_is_number, transform=_to_duration),
    CSVField(header="produits", key="products"),
    CSVField(header="notes", key="notes"),
]


@dataclass
class ImportStatus:
    """Progress and outcome of an import run."""

    total: int = 0
    current: int = 0
    success: int = 0
    errors: list[str] = field(default_factory=list)


async def import_clients(store: SalonStore, content: str) -> ImportStatus:
    """Create one client per valid row, awaiting each write in turn."""

    parsed = parse_csv(content, CLIENT_IMPORT_FIELDS)
    clients = [
        models.Client(
            name=row["name"],
            type=row["type"],
            notes=row.get("notes") or None,
            last_visit="",
            is_favorite=False,
        )
        for row in parsed.rows
    ]
    return await _feed_rows(parsed, clients, store.add_client, "clients")


async def import_services(store: SalonStore, content: str) -> ImportStatus:
    """Create one service per valid row, awaiting each write in turn."""

    parsed = parse_csv(content, SERVICE_IMPORT_FIELDS)
    services = [
        models.Service(
            client_id=row["client_id"],
            types=row["types"],
            price=row["price"],
            date=row["date"],
            duration=row.get("duration"),
            products=row.get("products") or None,
            notes=row.get("notes") or None,
        )
        for row in parsed.rows
    ]
    return await _feed_rows(parsed, services, store.add_service, "services")


async def _feed_rows(
    parsed: ParseResult,
    items: list[Any],
    create: Callable[[Any], Awaitable[Any]],
    label: str,
) -> ImportStatus:
    status = ImportStatus(total=len(items), errors=list(parsed.errors))

    for row_number, item in zip(parsed.row_numbers, items):
        try:
            await create(item)
            status.success += 1
        except Exception as exc:
            status.errors.append(f"Row {row_number}: {exc}")
        status.current += 1

    LOGGER.info(
        "Imported %s/%s %s with %s errors",
        status.success,
        status.total,
        label,
        len(status.errors),
    )
    return status


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(getattr(value, "value", value))


def _render(headers: list[str], rows: Iterable[list[Any]]) -> str:
    buffer = io.StringIO()
    buffer.write(",".join(headers))
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="")
    for row in rows:
        buffer.write("\n")
        writer.writerow([_format_cell(cell) for cell in row])
    return buffer.getvalue()


def export_clients(clients: Iterable[models.Client]) -> str:
    rows = (
        [
            client.id,
            client.name,
            client.type,
            client.notes or "",
            client.last_visit or "",
            "oui" if client.is_favorite else "non",
        ]
        for client in clients
    )
    return _render(CLIENT_EXPORT_HEADERS, rows)


def export_services(services: Iterable[models.Service]) -> str:
    rows = (
        [
            service.id,
            service.client_id,
            ", ".join(_format_cell(service_type) for service_type in service.types),
            service.price,
            service.date,
            service.duration or "",
            service.products or "",
            service.notes or "",
        ]
        for service in services
    )
    return _render(SERVICE_EXPORT_HEADERS, rows)
