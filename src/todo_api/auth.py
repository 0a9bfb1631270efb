from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from .errors import Unauthenticated
from .settings import get_settings


@dataclass(frozen=True)
class Principal:
    """The authenticated user on whose behalf an operation runs."""

    id: str
    email: str


# PUBLIC_INTERFACE
def get_session(request: Request) -> Optional[Dict[str, Any]]:
    """
    Return the session supplied by the upstream authenticator, or None.

    The authenticator forwards the signed-in user as trusted headers (names
    configured via AUTH_USER_ID_HEADER / AUTH_USER_EMAIL_HEADER). The session
    has the shape {"user": {"id": ..., "email": ...}}. Deployments using a
    different session source override this dependency.
    """
    settings = get_settings()
    user_id = request.headers.get(settings.auth_user_id_header)
    email = request.headers.get(settings.auth_user_email_header)
    if user_id is None and email is None:
        return None
    return {"user": {"id": user_id, "email": email}}


def principal_from_session(session: Optional[Dict[str, Any]]) -> Principal:
    """
    Build a Principal from a session mapping.

    Raises:
        Unauthenticated if the session, its user, or the user's id or email is missing.
    """
    user = (session or {}).get("user") or {}
    user_id = str(user.get("id") or "").strip()
    email = str(user.get("email") or "").strip()
    if not user_id or not email:
        raise Unauthenticated()
    return Principal(id=user_id, email=email)


# PUBLIC_INTERFACE
def get_principal(session: Optional[Dict[str, Any]] = Depends(get_session)) -> Principal:
    """FastAPI dependency returning the authenticated Principal; responds 401 otherwise."""
    return principal_from_session(session)
