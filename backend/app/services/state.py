"""Pure state transitions for the salon session snapshot.

Every transition returns a new :class:`AppState`; records are replaced with
:func:`dataclasses.replace` rather than mutated so earlier snapshots remain
valid. Service transitions keep each client's derived ``last_visit`` equal to
the most recent ISO date among that client's services.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Optional

from .. import models


class ActionType(str, enum.Enum):
    SET_LOADING = "SET_LOADING"
    SET_ERROR = "SET_ERROR"
    SET_CLIENTS = "SET_CLIENTS"
    SET_SERVICES = "SET_SERVICES"
    SET_SETTINGS = "SET_SETTINGS"
    ADD_CLIENT = "ADD_CLIENT"
    UPDATE_CLIENT = "UPDATE_CLIENT"
    DELETE_CLIENT = "DELETE_CLIENT"
    ADD_SERVICE = "ADD_SERVICE"
    UPDATE_SERVICE = "UPDATE_SERVICE"
    DELETE_SERVICE = "DELETE_SERVICE"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"
    TOGGLE_FAVORITE = "TOGGLE_FAVORITE"


@dataclass(frozen=True)
class Action:
    """A state transition request; the payload shape depends on ``type``."""

    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class AppState:
    clients: tuple[models.Client, ...] = field(default_factory=tuple)
    services: tuple[models.Service, ...] = field(default_factory=tuple)
    settings: Optional[models.SalonSettings] = None
    loading: bool = True
    error: Optional[str] = None


def latest_visit(client: models.Client, services: Iterable[models.Service]) -> str:
    """Return the most recent service date of ``client``.

    ISO dates are zero padded so string order is chronological. When the
    client has no dated service the current ``last_visit`` is kept.
    """

    dates = sorted(
        (service.date for service in services if service.client_id == client.id),
        reverse=True,
    )
    if dates and dates[0]:
        return dates[0]
    return client.last_visit


def _recompute_client(client: models.Client, services: Iterable[models.Service]) -> models.Client:
    last_visit = latest_visit(client, services)
    if last_visit == client.last_visit:
        return client
    return replace(client, last_visit=last_visit)


def _recompute_all(
    clients: Iterable[models.Client], services: tuple[models.Service, ...]
) -> tuple[models.Client, ...]:
    return tuple(_recompute_client(client, services) for client in clients)


def _set_loading(state: AppState, payload: bool) -> AppState:
    return replace(state, loading=bool(payload))


def _set_error(state: AppState, payload: Optional[str]) -> AppState:
    return replace(state, error=payload)


def _set_clients(state: AppState, payload: Iterable[models.Client]) -> AppState:
    return replace(state, clients=tuple(payload))


def _set_services(state: AppState, payload: Iterable[models.Service]) -> AppState:
    # Stored client documents are not rewritten on service changes.
    services = tuple(payload)
    return replace(state, services=services, clients=_recompute_all(state.clients, services))


def _set_settings(state: AppState, payload: models.SalonSettings) -> AppState:
    return replace(state, settings=payload)


def _add_client(state: AppState, payload: models.Client) -> AppState:
    return replace(state, clients=(*state.clients, payload))


def _update_client(state: AppState, payload: models.Client) -> AppState:
    clients = tuple(
        payload if client.id == payload.id else client for client in state.clients
    )
    return replace(state, clients=clients)


def _delete_client(state: AppState, payload: str) -> AppState:
    # Services of the removed client are left in place.
    clients = tuple(client for client in state.clients if client.id != payload)
    return replace(state, clients=clients)


def _add_service(state: AppState, payload: models.Service) -> AppState:
    services = (*state.services, payload)
    clients = tuple(
        _recompute_client(client, services) if client.id == payload.client_id else client
        for client in state.clients
    )
    return replace(state, services=services, clients=clients)


def _update_service(state: AppState, payload: models.Service) -> AppState:
    services = tuple(
        payload if service.id == payload.id else service for service in state.services
    )
    return replace(state, services=services, clients=_recompute_all(state.clients, services))


def _delete_service(state: AppState, payload: str) -> AppState:
    services = tuple(service for service in state.services if service.id != payload)
    return replace(state, services=services, clients=_recompute_all(state.clients, services))


def _toggle_favorite(state: AppState, payload: str) -> AppState:
    clients = tuple(
        replace(client, is_favorite=not client.is_favorite) if client.id == payload else client
        for client in state.clients
    )
    return replace(state, clients=clients)


_HANDLERS: dict[ActionType, Callable[[AppState, Any], AppState]] = {
    ActionType.SET_LOADING: _set_loading,
    ActionType.SET_ERROR: _set_error,
    ActionType.SET_CLIENTS: _set_clients,
    ActionType.SET_SERVICES: _set_services,
    ActionType.SET_SETTINGS: _set_settings,
    ActionType.ADD_CLIENT: _add_client,
    ActionType.UPDATE_CLIENT: _update_client,
    ActionType.DELETE_CLIENT: _delete_client,
    ActionType.ADD_SERVICE: _add_service,
    ActionType.UPDATE_SERVICE: _update_service,
    ActionType.DELETE_SERVICE: _delete_service,
    ActionType.UPDATE_SETTINGS: _set_settings,
    ActionType.TOGGLE_FAVORITE: _toggle_favorite,
}


def app_reducer(state: AppState, action: Action) -> AppState:
    """Apply ``action`` to ``state`` and return the resulting snapshot."""

    handler = _HANDLERS.get(ActionType(action.type))
    if handler is None:  # pragma: no cover - every ActionType has a handler
        return state
    return handler(state, action.payload)
