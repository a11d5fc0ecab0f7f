from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

import bcrypt
import jwt

from ..config import DEFAULT_APP_CONFIG, AppConfig

logger = logging.getLogger(__name__)

AuthStateListener = Callable[[str, dict[str, Any] | None], None]

# email -> {uid, password_hash, display_name}
_users: dict[str, dict[str, Any]] = {}
# (provider, subject) -> identity
_federated: dict[tuple[str, str], dict[str, Any]] = {}
_listeners: list[AuthStateListener] = []


class AuthError(Exception):
    pass


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _identity(uid: str, email: str, display_name: str, provider: str) -> dict[str, Any]:
    return {"uid": uid, "email": email, "display_name": display_name, "provider": provider}


def _notify(uid: str, identity: dict[str, Any] | None) -> None:
    for listener in list(_listeners):
        try:
            listener(uid, identity)
        except Exception:
            logger.warning("Auth state listener failed for %s", uid, exc_info=True)


def subscribe(listener: AuthStateListener) -> Callable[[], None]:
    """Call *listener* with ``(uid, identity | None)`` on every auth state change.

    Returns a function that removes the listener again.
    """
    _listeners.append(listener)

    def unsubscribe() -> None:
        if listener in _listeners:
            _listeners.remove(listener)

    return unsubscribe


def register(email: str, password: str, display_name: str = "") -> dict[str, Any]:
    """Create a password account and sign it in. Raises ``AuthError`` if taken."""
    key = _normalize_email(email)
    if not key:
        raise AuthError("email is required")
    if key in _users:
        raise AuthError("email already registered")
    uid = uuid.uuid4().hex
    _users[key] = {
        "uid": uid,
        "password_hash": _hash_password(password),
        "display_name": display_name,
    }
    identity = _identity(uid, key, display_name, "password")
    _notify(uid, identity)
    return identity


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the identity or ``None``."""
    key = _normalize_email(email)
    record = _users.get(key)
    if record and _verify_password(password, record["password_hash"]):
        identity = _identity(record["uid"], key, record["display_name"], "password")
        _notify(record["uid"], identity)
        return identity
    return None


def verify_id_token(token: str, config: AppConfig = DEFAULT_APP_CONFIG) -> dict[str, Any]:
    """Decode and verify a provider ID token. Raises ``AuthError`` if invalid."""
    try:
        return jwt.decode(
            token,
            config.federated_jwt_secret,
            algorithms=list(config.federated_jwt_algorithms),
            audience=config.federated_jwt_audience,
            options={
                "verify_exp": True,
                "verify_aud": True,
                "require": ["sub", "exp", "aud"],
            },
        )
    except jwt.ExpiredSignatureError as exc:
        raise AuthError("id token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthError(f"invalid id token: {exc}") from exc


def authenticate_federated(
    provider: str,
    id_token: str,
    config: AppConfig = DEFAULT_APP_CONFIG,
) -> dict[str, Any]:
    """Sign in with a provider-issued ID token.

    Subject, email and name come from the verified claims only; the uid is
    stable for a given ``(provider, sub)`` pair. Raises ``AuthError``.
    """
    claims = verify_id_token(id_token, config)
    key = (provider, str(claims["sub"]))
    identity = _federated.get(key)
    if identity is None:
        identity = _identity(
            uuid.uuid4().hex,
            _normalize_email(claims.get("email") or ""),
            claims.get("name") or "",
            provider,
        )
        _federated[key] = identity
    _notify(identity["uid"], dict(identity))
    return dict(identity)


def sign_out(uid: str) -> None:
    _notify(uid, None)
