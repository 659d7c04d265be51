from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure the project root (which exposes the ``backend`` package) is on ``sys.path``
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SALON_JWT_SECRET", "salon-test-secret-0123456789abcdef")

from backend.app import models
from backend.app.database import Base
from backend.app.dependencies import get_gateway
from backend.app.main import app
from backend.app.security import create_access_token
from backend.app.services import DocumentStoreGateway, GatewayError, SalonStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def gateway(session_factory) -> DocumentStoreGateway:
    return DocumentStoreGateway(session_factory)


@pytest.fixture
def user() -> models.UserProfile:
    return models.UserProfile(id="user-1", email="salon@example.com", display_name="Salon Test")


@pytest.fixture
def store(gateway, user) -> SalonStore:
    return SalonStore(gateway, user)


class FailingGateway:
    """Gateway double whose writes fail after delegating reads."""

    def __init__(self, inner: DocumentStoreGateway) -> None:
        self.inner = inner
        self.calls: list[str] = []

    async def list_by_owner(self, collection: str, owner_id: str) -> list[dict[str, Any]]:
        return await self.inner.list_by_owner(collection, owner_id)

    async def exists(self, collection: str, document_id: str) -> bool:
        return await self.inner.exists(collection, document_id)

    async def create(self, collection: str, document: dict[str, Any]) -> str:
        self.calls.append("create")
        raise GatewayError("document store unavailable")

    async def update(self, collection: str, document_id: str, changes: dict[str, Any]) -> None:
        self.calls.append("update")
        raise GatewayError("document store unavailable")

    async def delete(self, collection: str, document_id: str) -> None:
        self.calls.append("delete")
        raise GatewayError("document store unavailable")


@pytest.fixture
def failing_gateway(gateway) -> FailingGateway:
    return FailingGateway(gateway)


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def client(gateway, auth_headers) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        test_client.headers.update(auth_headers)
        yield test_client
    app.dependency_overrides.pop(get_gateway, None)
