from __future__ import annotations

from typing import Any

import bcrypt

# username, password, user id, role
_DEMO_ACCOUNTS = (
    ("user", "user123", 1, "user"),
    ("admin", "admin123", 2, "admin"),
    ("dealer", "dealer123", 3, "dealer"),
)

_accounts: dict[str, dict[str, Any]] = {}


def _seed_accounts() -> None:
    for username, password, user_id, role in _DEMO_ACCOUNTS:
        _accounts[username] = {
            "id": user_id,
            "role": role,
            "password_hash": bcrypt.hashpw(password.encode(), bcrypt.gensalt()),
        }


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Check a login. Returns the session payload ``{id, username, role}`` or ``None``."""
    account = _accounts.get(username)
    if account is None or not bcrypt.checkpw(password.encode(), account["password_hash"]):
        return None
    return {"id": account["id"], "username": username, "role": account["role"]}


_seed_accounts()
