from fastapi.testclient import TestClient

from backend.app.main import (
    LOCAL_DEVELOPMENT_ORIGINS,
    _resolve_allowed_origins,
    _split_raw_origins,
    app,
)


def test_split_raw_origins_accepts_commas_and_whitespace():
    raw = "http://localhost:5173, http://127.0.0.1:5173 http://0.0.0.0:5173"
    assert _split_raw_origins(raw) == [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://0.0.0.0:5173",
    ]


def test_resolve_allowed_origins_keeps_local_development_origins(monkeypatch):
    monkeypatch.setenv(
        "BACKEND_ALLOWED_ORIGINS",
        "https://salon.example.com/ https://admin.salon.example.com",
    )

    origins = _resolve_allowed_origins()

    assert origins == sorted(
        {
            "https://salon.example.com",
            "https://admin.salon.example.com",
            *LOCAL_DEVELOPMENT_ORIGINS,
        }
    )


def test_resolve_allowed_origins_falls_back_to_defaults(monkeypatch):
    monkeypatch.delenv("BACKEND_ALLOWED_ORIGINS", raising=False)

    origins = _resolve_allowed_origins()

    assert "http://localhost:4173" in origins
    assert set(LOCAL_DEVELOPMENT_ORIGINS) <= set(origins)


def test_clients_endpoint_includes_cors_headers_for_local_dev_origin():
    client = TestClient(app)
    origin = "http://localhost:5173"

    response = client.options(
        "/clients/",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": "GET",
        },
    )

    assert response.status_code == 200
    assert response.headers.get("access-control-allow-origin") == origin
