from datetime import timedelta

import pytest
from fastapi import HTTPException

from backend.app import models
from backend.app.security import (
    SecurityConfigurationError,
    _load_jwt_key,
    create_access_token,
    decode_access_token,
)


@pytest.fixture
def reset_jwt_key():
    _load_jwt_key.cache_clear()
    yield
    _load_jwt_key.cache_clear()


def test_access_token_round_trip(user):
    token = create_access_token(user)

    assert decode_access_token(token) == user


def test_tampered_token_is_rejected(user):
    token = create_access_token(user)
    header, _, signature = token.split(".")
    forged = create_access_token(models.UserProfile(id="intruder", email="x@example.com"))
    tampered = ".".join([header, forged.split(".")[1], signature])

    with pytest.raises(HTTPException) as excinfo:
        decode_access_token(tampered)

    assert excinfo.value.status_code == 401


def test_malformed_token_is_rejected():
    with pytest.raises(HTTPException) as excinfo:
        decode_access_token("not-a-token")

    assert excinfo.value.status_code == 401


def test_expired_token_is_rejected(user):
    token = create_access_token(user, expires_in=timedelta(seconds=-5))

    with pytest.raises(HTTPException) as excinfo:
        decode_access_token(token)

    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == "Token expired"


def test_token_from_another_issuer_is_rejected(user, monkeypatch):
    monkeypatch.setenv("SALON_TOKEN_ISSUER", "someone-else")
    token = create_access_token(user)
    monkeypatch.delenv("SALON_TOKEN_ISSUER")

    with pytest.raises(HTTPException):
        decode_access_token(token)


def test_missing_secret_is_a_configuration_error(user, monkeypatch, reset_jwt_key):
    monkeypatch.delenv("SALON_JWT_SECRET", raising=False)

    with pytest.raises(SecurityConfigurationError):
        create_access_token(user)


def test_invalid_expiry_configuration(user, monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "soon")

    with pytest.raises(SecurityConfigurationError):
        create_access_token(user)
