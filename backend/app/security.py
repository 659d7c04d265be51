"""Bearer token verification for identities issued by the salon auth provider."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .models import UserProfile

JWT_SECRET_ENV = "SALON_JWT_SECRET"
TOKEN_ISSUER_ENV = "SALON_TOKEN_ISSUER"
ACCESS_TOKEN_EXPIRE_MINUTES_ENV = "ACCESS_TOKEN_EXPIRE_MINUTES"

DEFAULT_TOKEN_ISSUER = "salon-auth"

bearer_scheme = HTTPBearer(auto_error=False)


class SecurityConfigurationError(RuntimeError):
    """Raised when mandatory security settings are missing or invalid."""


def _read_env_var(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise SecurityConfigurationError(f"Environment variable '{name}' is required")
    return value


@lru_cache(maxsize=1)
def _load_jwt_key() -> bytes:
    raw_secret = _read_env_var(JWT_SECRET_ENV)
    try:
        return base64.urlsafe_b64decode(raw_secret)
    except (ValueError, binascii.Error):
        return raw_secret.encode("utf-8")


def _resolve_issuer() -> str:
    return os.getenv(TOKEN_ISSUER_ENV) or DEFAULT_TOKEN_ISSUER


def _resolve_access_token_expiry() -> timedelta:
    raw = os.getenv(ACCESS_TOKEN_EXPIRE_MINUTES_ENV)
    if not raw:
        return timedelta(minutes=60)
    try:
        minutes = int(raw)
    except ValueError as exc:
        raise SecurityConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be an integer") from exc
    if minutes <= 0:
        raise SecurityConfigurationError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
    return timedelta(minutes=minutes)


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _invalid_token(detail: str = "Invalid token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _encode_jwt(payload: dict[str, Any], key: bytes) -> str:
    header = {"typ": "JWT", "alg": "HS256"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    signature = hmac.new(key, signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(signature)}"


def _decode_jwt(token: str, key: bytes) -> dict[str, Any]:
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
        signature = _b64url_decode(signature_b64)
        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    except (ValueError, binascii.Error) as exc:
        raise _invalid_token() from exc

    expected_signature = hmac.new(key, signing_input, hashlib.sha256).digest()
    if not hmac.compare_digest(signature, expected_signature):
        raise _invalid_token()

    try:
        payload_data = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    except (ValueError, binascii.Error) as exc:
        raise _invalid_token() from exc
    if not isinstance(payload_data, dict) or payload_data.get("exp") is None:
        raise _invalid_token()
    exp = int(payload_data["exp"])
    if datetime.now(timezone.utc) >= datetime.fromtimestamp(exp, tz=timezone.utc):
        raise _invalid_token("Token expired")
    if payload_data.get("iss") != _resolve_issuer():
        raise _invalid_token()
    return payload_data


def create_access_token(user: UserProfile, *, expires_in: Optional[timedelta] = None) -> str:
    """Issue a signed token for ``user``; used by the provider and by tooling."""

    key = _load_jwt_key()
    expiry = datetime.now(timezone.utc) + (expires_in or _resolve_access_token_expiry())
    payload: dict[str, Any] = {
        "sub": user.id,
        "email": user.email,
        "name": user.display_name,
        "iss": _resolve_issuer(),
        "exp": int(expiry.timestamp()),
    }
    return _encode_jwt(payload, key)


def decode_access_token(token: str) -> UserProfile:
    payload = _decode_jwt(token, _load_jwt_key())
    user_id = payload.get("sub")
    email = payload.get("email")
    if not isinstance(user_id, str) or not user_id or not isinstance(email, str):
        raise _invalid_token()
    display_name = payload.get("name")
    return UserProfile(
        id=user_id,
        email=email,
        display_name=display_name if isinstance(display_name, str) else None,
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> UserProfile:
    """FastAPI dependency resolving the signed-in salon account."""

    if credentials is None or not credentials.credentials:
        raise _invalid_token("Not authenticated")
    return decode_access_token(credentials.credentials)
