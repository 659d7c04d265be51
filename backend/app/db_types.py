"""Custom SQLAlchemy column types for multi-database compatibility."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy.dialects import postgresql
from sqlalchemy.types import Text, TypeDecorator


class JSONDocument(TypeDecorator):
    """Platform-independent JSON document type.

    Stores documents as ``JSONB`` in PostgreSQL and as serialized text
    elsewhere. Values are always handed back to the application as plain
    dictionaries.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        if dialect.name == "postgresql":
            return dict(value)
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    def process_result_value(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return {}
        if isinstance(value, (bytes, str)):
            return json.loads(value)
        return dict(value)
