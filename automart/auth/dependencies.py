from __future__ import annotations

from typing import Callable

from fastapi import HTTPException, Request


def get_current_user(request: Request) -> dict | None:
    """Session user, or ``None`` for anonymous shoppers."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    """Raise 401 unless someone is logged in."""
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_role(*roles: str) -> Callable[[Request], dict]:
    """Build a dependency that raises 401 when logged out, 403 for other roles."""

    def dependency(request: Request) -> dict:
        user = require_user(request)
        if user.get("role") not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"{' or '.join(r.capitalize() for r in roles)} access required",
            )
        return user

    return dependency


require_admin = require_role("admin")
