"""Persistence gateway over the per-user document collections."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..database import SessionLocal, session_scope

LOGGER = logging.getLogger(__name__)

CLIENTS_COLLECTION = "clients"
SERVICES_COLLECTION = "services"
SETTINGS_COLLECTION = "settings"

OWNER_FIELD = "user_id"


class GatewayError(RuntimeError):
    """Raised when the document store rejects or fails an operation."""


class DocumentNotFoundError(GatewayError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, document_id: str) -> None:
        super().__init__(f"Document {document_id} not found in {collection}")
        self.collection = collection
        self.document_id = document_id


class PersistenceGateway(Protocol):
    """Operations the session store needs from the document store."""

    async def list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        ...

    async def create(self, collection: str, document: dict[str, Any]) -> str:
        ...

    async def update(self, collection: str, document_id: str, changes: dict[str, Any]) -> None:
        ...

    async def delete(self, collection: str, document_id: str) -> None:
        ...

    async def exists(self, collection: str, document_id: str) -> bool:
        ...


class DocumentStoreGateway:
    """SQLAlchemy backed implementation of :class:`PersistenceGateway`.

    Each call runs in its own transaction on a worker thread so the event loop
    is never blocked by the database driver.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None) -> None:
        self._session_factory = session_factory or SessionLocal

    async def list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        return await self._run(self._list_by_owner, collection, owner_id)

    async def create(self, collection: str, document: dict[str, Any]) -> str:
        return await self._run(self._create, collection, document)

    async def update(self, collection: str, document_id: str, changes: dict[str, Any]) -> None:
        await self._run(self._update, collection, document_id, changes)

    async def delete(self, collection: str, document_id: str) -> None:
        await self._run(self._delete, collection, document_id)

    async def exists(self, collection: str, document_id: str) -> bool:
        return await self._run(self._exists, collection, document_id)

    async def _run(self, operation: Callable[..., Any], *args: Any) -> Any:
        try:
            return await run_in_threadpool(operation, *args)
        except GatewayError:
            raise
        except SQLAlchemyError as exc:
            LOGGER.warning("Document store operation %s failed: %s", operation.__name__, exc)
            raise GatewayError("The document store could not complete the operation") from exc

    def _list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        with session_scope(self._session_factory) as session:
            documents = (
                session.query(models.StoredDocument)
                .filter(
                    models.StoredDocument.collection == collection,
                    models.StoredDocument.owner_id == owner_id,
                )
                .order_by(models.StoredDocument.created_at, models.StoredDocument.id)
                .all()
            )
            return [document.to_document() for document in documents]

    def _create(self, collection: str, document: dict[str, Any]) -> str:
        owner_id = document.get(OWNER_FIELD)
        if not owner_id:
            raise GatewayError(f"Documents in {collection} must carry an owner")
        payload = {key: value for key, value in document.items() if key != "id"}
        with session_scope(self._session_factory) as session:
            stored = models.StoredDocument(
                collection=collection,
                owner_id=str(owner_id),
                data=payload,
            )
            session.add(stored)
            session.flush()
            return stored.id

    def _update(self, collection: str, document_id: str, changes: dict[str, Any]) -> None:
        with session_scope(self._session_factory) as session:
            stored = self._get(session, collection, document_id)
            if stored is None:
                raise DocumentNotFoundError(collection, document_id)
            merged = dict(stored.data or {})
            merged.update({key: value for key, value in changes.items() if key != "id"})
            stored.data = merged
            if merged.get(OWNER_FIELD):
                stored.owner_id = str(merged[OWNER_FIELD])

    def _delete(self, collection: str, document_id: str) -> None:
        with session_scope(self._session_factory) as session:
            stored = self._get(session, collection, document_id)
            if stored is not None:
                session.delete(stored)

    def _exists(self, collection: str, document_id: str) -> bool:
        with session_scope(self._session_factory) as session:
            return self._get(session, collection, document_id) is not None

    @staticmethod
    def _get(session: Session, collection: str, document_id: str) -> Optional[models.StoredDocument]:
        return (
            session.query(models.StoredDocument)
            .filter(
                models.StoredDocument.collection == collection,
                models.StoredDocument.id == document_id,
            )
            .first()
        )
