"""SQLAlchemy model backing the per-user document collections."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, String

from ..database import Base
from ..db_types import JSONDocument


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _generate_document_id() -> str:
    return uuid.uuid4().hex


class StoredDocument(Base):
    """A single document of a collection, tagged with its owning user."""

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_collection_owner", "collection", "owner_id"),
    )

    id = Column("document_id", String(32), primary_key=True, default=_generate_document_id)
    collection = Column(String(64), nullable=False)
    owner_id = Column(String(128), nullable=False)
    data = Column(JSONDocument(), nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    def to_document(self) -> dict:
        """Return the stored payload merged with its identifier."""

        return {**(self.data or {}), "id": self.id}
