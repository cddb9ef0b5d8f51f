from __future__ import annotations

import hmac
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import bcrypt
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AuthConfig:
    admin_key: str = os.getenv("ADMIN_SECRET_KEY", "").strip()
    session_secret: str = os.getenv("SESSION_SECRET", "foodmap-secret-change-in-production")


DEFAULT_AUTH_CONFIG = AuthConfig()

_users: dict[str, dict[str, Any]] = {}


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    _users["user"] = {"password_hash": _hash_password("user123"), "role": "user"}
    _users["admin"] = {"password_hash": _hash_password("admin123"), "role": "admin"}


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns ``{username, role}`` or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return {"username": username, "role": record["role"]}
    return None


@dataclass(frozen=True)
class AdminCredential:
    """What a caller presented: a session user, an admin key, or neither."""

    user: dict[str, Any] | None = None
    api_key: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.user and not self.api_key


class AdminAuthorizer:
    def __init__(self, config: AuthConfig = DEFAULT_AUTH_CONFIG) -> None:
        self.config = config

    def is_admin(self, credential: AdminCredential) -> bool:
        if credential.user and credential.user.get("role") == "admin":
            return True
        if credential.api_key and self.config.admin_key:
            return hmac.compare_digest(credential.api_key.strip(), self.config.admin_key)
        return False


_seed_users()
