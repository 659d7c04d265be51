"""Expose the salon back office FastAPI app and its local development CORS defaults."""

import logging
import os
import re
from contextlib import asynccontextmanager
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .migrations import run_database_migrations
from .routers import (
    auth_router,
    client_services_router,
    clients_router,
    data_management_router,
    settings_router,
)
from .services import SessionRegistry

LOCAL_DEVELOPMENT_ORIGINS = {
    "http://localhost:5173",
    "http://127.0.0.1:5173",
}
LOCALHOST_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1|0\.0\.0\.0)(:\d+)?$"

DEFAULT_ALLOWED_ORIGINS = {
    *LOCAL_DEVELOPMENT_ORIGINS,
    "http://0.0.0.0:5173",
    "http://localhost:4173",
    "http://127.0.0.1:4173",
}

LOGGER = logging.getLogger(__name__)


def _normalize_origin(origin: str) -> str | None:
    stripped = origin.strip()
    if not stripped:
        return None
    return stripped.rstrip("/")


def _read_allowed_origins(raw_origins: Iterable[str]) -> list[str]:
    normalized = {_normalize_origin(origin) for origin in raw_origins}
    return sorted({origin for origin in normalized if origin})


def _split_raw_origins(raw_value: str) -> list[str]:
    """Split a raw origin string using commas or whitespace as separators."""

    return [origin for origin in re.split(r"[\s,]+", raw_value) if origin]


def _resolve_allowed_origins() -> list[str]:
    raw_value = os.getenv("BACKEND_ALLOWED_ORIGINS")
    if raw_value:
        origins = _read_allowed_origins(_split_raw_origins(raw_value))
        if origins:
            return _read_allowed_origins([*origins, *LOCAL_DEVELOPMENT_ORIGINS])
    return _read_allowed_origins(DEFAULT_ALLOWED_ORIGINS)


def ensure_database_is_ready() -> None:
    """Apply pending database migrations when the service starts."""

    LOGGER.info("Ensuring the document store schema is up to date before serving requests")
    run_database_migrations()


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_database_is_ready()
    app.state.sessions = SessionRegistry()
    try:
        yield
    finally:
        app.state.sessions.close_all()


app = FastAPI(title="Salon Back Office API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_origin_regex=LOCALHOST_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(clients_router, prefix="/clients", tags=["clients"])
app.include_router(client_services_router, prefix="/services", tags=["services"])
app.include_router(settings_router, prefix="/settings", tags=["settings"])
app.include_router(data_management_router, prefix="/data", tags=["data"])


@app.get("/", tags=["health"])
def read_root() -> dict[str, str]:
    """Return a simple health check response."""
    return {"status": "ok"}
