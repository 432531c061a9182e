from __future__ import annotations

import threading
import uuid
from typing import Any

import bcrypt

MIN_PASSWORD_LENGTH = 6

_users: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()


class RegistrationError(ValueError):
    """Raised when a registration request is rejected."""


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(record: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": record["id"],
        "name": record["name"],
        "email": record["email"],
        "role": record["role"],
    }


def register(name: str, email: str, password: str, role: str = "user") -> dict[str, Any]:
    """Create a user. Returns ``{id, name, email, role}``."""
    name = name.strip()
    email = email.strip().lower()
    if not name or not email or not password:
        raise RegistrationError("Please provide name, email and password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise RegistrationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    with _lock:
        if email in _users:
            raise RegistrationError("User already exists with this email")
        record = {
            "id": uuid.uuid4().hex,
            "name": name,
            "email": email,
            "role": role,
            "password_hash": _hash_password(password),
        }
        _users[email] = record
    return _public(record)


def authenticate(email: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{id, name, email, role}`` or ``None``."""
    record = _users.get(email.strip().lower())
    if record and _verify_password(password, record["password_hash"]):
        return _public(record)
    return None


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    register("Demo User", "user@example.com", "user123")
    register("Demo Admin", "admin@example.com", "admin123", role="admin")


_seed_users()
