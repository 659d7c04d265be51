"""Session-scoped state container for one authenticated salon account."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Optional

from .. import models
from . import records
from .gateway import (
    CLIENTS_COLLECTION,
    SERVICES_COLLECTION,
    SETTINGS_COLLECTION,
    PersistenceGateway,
)
from .state import Action, ActionType, AppState, app_reducer

LOGGER = logging.getLogger(__name__)


class AuthenticationRequiredError(PermissionError):
    """Raised when a mutation is attempted without an authenticated user."""

    def __init__(self) -> None:
        super().__init__("User must be authenticated")


class SalonStore:
    """Owns the clients, services and settings of one user session.

    Mutations are validated and written through the persistence gateway
    before the pure reducer step is applied, so the in-memory snapshot never
    reflects a write that failed. Mutations are processed one at a time.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        user: Optional[models.UserProfile],
        *,
        initial_state: Optional[AppState] = None,
    ) -> None:
        self._gateway = gateway
        self._user = user
        self._state = initial_state or AppState()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def user(self) -> Optional[models.UserProfile]:
        return self._user

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    def _apply(self, action: Action) -> None:
        self._state = app_reducer(self._state, action)

    def _require_user_id(self) -> str:
        if self._user is None or not self._user.id:
            raise AuthenticationRequiredError()
        return self._user.id

    async def load(self) -> None:
        """Replace the snapshot with the documents owned by the session user."""

        user_id = self._require_user_id()
        self._apply(Action(ActionType.SET_LOADING, True))
        self._apply(Action(ActionType.SET_ERROR, None))
        try:
            self._apply(Action(ActionType.SET_SETTINGS, await self._load_settings(user_id)))

            client_documents = await self._gateway.list_by_owner(CLIENTS_COLLECTION, user_id)
            self._apply(
                Action(
                    ActionType.SET_CLIENTS,
                    [records.client_from_document(document) for document in client_documents],
                )
            )

            service_documents = await self._gateway.list_by_owner(SERVICES_COLLECTION, user_id)
            self._apply(
                Action(
                    ActionType.SET_SERVICES,
                    [records.service_from_document(document) for document in service_documents],
                )
            )
        except Exception as exc:
            LOGGER.exception("Failed to load salon data for user %s", user_id)
            self._apply(Action(ActionType.SET_ERROR, str(exc) or "Error loading data"))
        finally:
            self._apply(Action(ActionType.SET_LOADING, False))

    async def _load_settings(self, user_id: str) -> models.SalonSettings:
        documents = await self._gateway.list_by_owner(SETTINGS_COLLECTION, user_id)
        if documents:
            return records.settings_from_document(documents[0])

        defaults = records.default_settings(user_id)
        document = records.serialize_settings(defaults, user_id)
        document_id = await self._gateway.create(SETTINGS_COLLECTION, document)
        LOGGER.info("Created default salon settings for user %s", user_id)
        return replace(defaults, id=document_id)

    async def dispatch(self, action: Action) -> None:
        """Persist ``action`` and apply it to the in-memory snapshot.

        Raises :class:`AuthenticationRequiredError` before any I/O when no
        user is bound. Any other failure is recorded in ``state.error`` and
        re-raised; the collections are left unchanged.
        """

        user_id = self._require_user_id()
        handler = self._handlers().get(ActionType(action.type))

        async with self._lock:
            try:
                if handler is None:
                    self._apply(action)
                else:
                    await handler(action, user_id)
            except Exception as exc:
                self._apply(Action(ActionType.SET_ERROR, str(exc)))
                raise

    def _handlers(self) -> dict[ActionType, Callable[[Action, str], Awaitable[None]]]:
        return {
            ActionType.ADD_CLIENT: self._add_client,
            ActionType.UPDATE_CLIENT: self._update_client,
            ActionType.DELETE_CLIENT: self._delete_client,
            ActionType.ADD_SERVICE: self._add_service,
            ActionType.UPDATE_SERVICE: self._update_service,
            ActionType.DELETE_SERVICE: self._delete_service,
            ActionType.UPDATE_SETTINGS: self._update_settings,
            ActionType.TOGGLE_FAVORITE: self._toggle_favorite,
        }

    async def _add_client(self, action: Action, user_id: str) -> None:
        client: models.Client = action.payload
        await records.validate_client(client, self._gateway)
        document = records.serialize_client(client, user_id)
        document_id = await self._gateway.create(CLIENTS_COLLECTION, document)
        created = records.apply_document(replace(client, id=document_id), document)
        self._apply(Action(ActionType.ADD_CLIENT, created))

    async def _update_client(self, action: Action, user_id: str) -> None:
        client: models.Client = action.payload
        await records.validate_client(client, self._gateway)
        document = records.serialize_client(client, user_id)
        await self._gateway.update(CLIENTS_COLLECTION, client.id, document)
        self._apply(Action(ActionType.UPDATE_CLIENT, records.apply_document(client, document)))

    async def _delete_client(self, action: Action, user_id: str) -> None:
        await self._gateway.delete(CLIENTS_COLLECTION, action.payload)
        self._apply(action)

    async def _add_service(self, action: Action, user_id: str) -> None:
        service: models.Service = action.payload
        await records.validate_service(service, self._gateway)
        document = records.serialize_service(service, user_id)
        document_id = await self._gateway.create(SERVICES_COLLECTION, document)
        created = records.apply_document(replace(service, id=document_id), document)
        self._apply(Action(ActionType.ADD_SERVICE, created))

    async def _update_service(self, action: Action, user_id: str) -> None:
        service: models.Service = action.payload
        await records.validate_service(service, self._gateway)
        document = records.serialize_service(service, user_id)
        await self._gateway.update(SERVICES_COLLECTION, service.id, document)
        self._apply(Action(ActionType.UPDATE_SERVICE, records.apply_document(service, document)))

    async def _delete_service(self, action: Action, user_id: str) -> None:
        await self._gateway.delete(SERVICES_COLLECTION, action.payload)
        self._apply(action)

    async def _update_settings(self, action: Action, user_id: str) -> None:
        settings: models.SalonSettings = action.payload
        records.validate_settings(settings)
        document = records.serialize_settings(settings, user_id)

        existing = await self._gateway.list_by_owner(SETTINGS_COLLECTION, user_id)
        if existing:
            settings_id = existing[0]["id"]
            await self._gateway.update(SETTINGS_COLLECTION, settings_id, document)
        else:
            settings_id = await self._gateway.create(SETTINGS_COLLECTION, document)

        updated = records.apply_document(replace(settings, id=settings_id), document)
        self._apply(Action(ActionType.UPDATE_SETTINGS, updated))

    async def _toggle_favorite(self, action: Action, user_id: str) -> None:
        client = self.get_client(action.payload)
        if client is None:
            LOGGER.debug("Ignoring favourite toggle for unknown client %s", action.payload)
            return
        toggled = replace(client, is_favorite=not client.is_favorite)
        document = records.serialize_client(toggled, user_id)
        await self._gateway.update(CLIENTS_COLLECTION, client.id, document)
        self._apply(action)

    def get_client(self, client_id: str) -> Optional[models.Client]:
        return next((client for client in self._state.clients if client.id == client_id), None)

    def get_service(self, service_id: str) -> Optional[models.Service]:
        return next(
            (service for service in self._state.services if service.id == service_id), None
        )

    def services_for_client(self, client_id: str) -> list[models.Service]:
        """Return the client's services, most recent first."""

        services = [service for service in self._state.services if service.client_id == client_id]
        return sorted(services, key=lambda service: service.date, reverse=True)

    async def add_client(self, client: models.Client) -> models.Client:
        await self.dispatch(Action(ActionType.ADD_CLIENT, client))
        return self._state.clients[-1]

    async def update_client(self, client: models.Client) -> models.Client:
        await self.dispatch(Action(ActionType.UPDATE_CLIENT, client))
        return self.get_client(client.id)

    async def delete_client(self, client_id: str) -> None:
        await self.dispatch(Action(ActionType.DELETE_CLIENT, client_id))

    async def add_service(self, service: models.Service) -> models.Service:
        await self.dispatch(Action(ActionType.ADD_SERVICE, service))
        return self._state.services[-1]

    async def update_service(self, service: models.Service) -> models.Service:
        await self.dispatch(Action(ActionType.UPDATE_SERVICE, service))
        return self.get_service(service.id)

    async def delete_service(self, service_id: str) -> None:
        await self.dispatch(Action(ActionType.DELETE_SERVICE, service_id))

    async def update_settings(self, settings: models.SalonSettings) -> models.SalonSettings:
        await self.dispatch(Action(ActionType.UPDATE_SETTINGS, settings))
        return self._state.settings

    async def toggle_favorite(self, client_id: str) -> Optional[models.Client]:
        await self.dispatch(Action(ActionType.TOGGLE_FAVORITE, client_id))
        return self.get_client(client_id)

    def close(self) -> None:
        """Unbind the user and drop the snapshot, as on sign-out."""

        self._user = None
        self._state = AppState(loading=False)


class SessionRegistry:
    """Keeps one loaded :class:`SalonStore` per signed-in user.

    Only stores whose load succeeded are kept; a failed load is retried on the
    next :meth:`open`. Loads of different users do not wait on each other.
    """

    def __init__(self) -> None:
        self._stores: dict[str, SalonStore] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, user_id: str) -> Optional[SalonStore]:
        return self._stores.get(user_id)

    async def open(self, user: models.UserProfile, gateway: PersistenceGateway) -> SalonStore:
        lock = self._locks.setdefault(user.id, asyncio.Lock())
        async with lock:
            store = self._stores.get(user.id)
            if store is not None:
                return store

            store = SalonStore(gateway, user)
            await store.load()
            if store.error is not None:
                LOGGER.warning(
                    "Salon session for user %s not kept after failed load: %s",
                    user.id,
                    store.error,
                )
                return store
            self._stores[user.id] = store
            LOGGER.info("Opened salon session for user %s", user.id)
            return store

    def close(self, user_id: str) -> bool:
        lock = self._locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._locks[user_id]
        store = self._stores.pop(user_id, None)
        if store is None:
            return False
        store.close()
        LOGGER.info("Closed salon session for user %s", user_id)
        return True

    def close_all(self) -> None:
        for user_id in list(self._stores):
            self.close(user_id)
