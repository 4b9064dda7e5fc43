"""Session handling through Supabase Auth.

Roles: any visitor (sign-up and sign-in) and authenticated users (session
restore and sign-out).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .common import (
    SupabaseAuthError,
    _handle_auth_error,
    _new_client,
    _normalize_login,
)


@dataclass
class AuthSession:
    user_id: str
    email: Optional[str]
    access_token: Optional[str]
    refresh_token: Optional[str]

    @classmethod
    def from_response(cls, response: Any) -> "AuthSession":
        user = getattr(response, "user", None)
        session = getattr(response, "session", None)
        if user is None and session is not None:
            user = getattr(session, "user", None)
        user_id = getattr(user, "id", None)
        if not user_id:
            raise SupabaseAuthError("Supabase Auth returned no user.")
        return cls(
            user_id=str(user_id),
            email=getattr(user, "email", None),
            access_token=getattr(session, "access_token", None),
            refresh_token=getattr(session, "refresh_token", None),
        )


def sign_up_user(
    url: str,
    key: str,
    *,
    email: str,
    password: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuthSession:
    """Create a Supabase Auth user.

    The returned session has no tokens when the project requires e-mail
    confirmation before the first sign-in.
    """

    identifier = _normalize_login(email)
    if not identifier:
        raise SupabaseAuthError("Invalid e-mail for sign-up.")

    client = _new_client(url, key)
    credentials: Dict[str, Any] = {"email": identifier, "password": password}
    if metadata:
        credentials["options"] = {"data": dict(metadata)}
    try:
        response = client.auth.sign_up(credentials)
    except Exception as exc:
        raise _handle_auth_error(exc) from exc
    return AuthSession.from_response(response)


def sign_in_user(url: str, key: str, *, email: str, password: str) -> AuthSession:
    """Password sign-in."""

    identifier = _normalize_login(email)
    if not identifier or not password:
        raise SupabaseAuthError("Invalid login credentials")

    client = _new_client(url, key)
    try:
        response = client.auth.sign_in_with_password(
            {"email": identifier, "password": password}
        )
    except Exception as exc:
        raise _handle_auth_error(exc) from exc
    return AuthSession.from_response(response)


def restore_user_session(
    url: str,
    key: str,
    *,
    access_token: str,
    refresh_token: str,
) -> AuthSession:
    """Validate stored tokens, refreshing them when expired."""

    if not access_token or not refresh_token:
        raise SupabaseAuthError("No stored session.")

    client = _new_client(url, key)
    try:
        response = client.auth.set_session(access_token, refresh_token)
    except Exception as exc:
        raise _handle_auth_error(exc) from exc
    return AuthSession.from_response(response)


def sign_out_user(
    url: str,
    key: str,
    *,
    access_token: Optional[str],
    refresh_token: Optional[str],
) -> None:
    """Revoke the session on the platform."""

    if not access_token or not refresh_token:
        return

    client = _new_client(url, key)
    try:
        client.auth.set_session(access_token, refresh_token)
        client.auth.sign_out()
    except Exception as exc:
        raise _handle_auth_error(exc) from exc


__all__ = [
    "AuthSession",
    "sign_up_user",
    "sign_in_user",
    "restore_user_session",
    "sign_out_user",
]
