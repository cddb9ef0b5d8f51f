from __future__ import annotations

from fastapi import HTTPException, Request

from .users import AdminCredential


def require_user(request: Request) -> dict:
    """Raise 401 if no user is logged in."""
    user = request.session.get("user")
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def get_admin_credential(request: Request) -> AdminCredential:
    """Collect the session user and ``X-Admin-Key`` header, unchecked."""
    return AdminCredential(
        user=request.session.get("user"),
        api_key=request.headers.get("X-Admin-Key"),
    )


def require_admin(request: Request) -> AdminCredential:
    """Raise 401 if no credential was presented, 403 if it is not an admin's."""
    credential = get_admin_credential(request)
    if credential.is_empty:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not request.app.state.engine.authorizer.is_admin(credential):
        raise HTTPException(status_code=403, detail="Admin access required")
    return credential
