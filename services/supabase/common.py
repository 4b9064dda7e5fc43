"""Components shared by the Supabase integrations.

Roles: helpers and records used by the auth, profile, note and storage
layers. Authorization is decided by the page modules before calling here.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from postgrest.exceptions import APIError
from supabase import Client, create_client


class SupabaseError(RuntimeError):
    """Base exception for Supabase related failures."""


class SupabaseConfigurationError(SupabaseError):
    """Raised when the Supabase client is not properly configured."""


class SupabaseUserExistsError(SupabaseError):
    """Raised when attempting to create a user that already exists."""


class SupabaseAuthError(SupabaseError):
    """Raised when credentials or a stored session are rejected."""


class SupabaseEmailNotConfirmedError(SupabaseAuthError):
    """Raised when signing in before the account's e-mail is confirmed."""


class SupabaseOperationError(SupabaseError):
    """Raised when an operation against Supabase fails."""


_cached_client: Optional[Client] = None
_client_signature: Optional[Tuple[str, str]] = None
_client_lock = threading.Lock()


def _is_placeholder(value: str) -> bool:
    if not value:
        return True
    markers = (
        "YOUR_SUPABASE",
        "SUPABASE_SERVICE_ROLE_KEY",
        "SUPABASE_ANON_KEY",
        "CHANGE_ME",
        "REPLACE_ME",
        "YOUR_PROJECT",
    )
    upper_value = value.upper()
    return any(marker in upper_value for marker in markers)


def _normalize_login(login: str) -> str:
    return (login or "").strip().lower()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_timestamp(value: Any) -> Optional[str]:
    """Convert assorted timestamp inputs to an ISO-8601 UTC string."""

    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        return text or None
    if isinstance(value, datetime):
        dt = value
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        else:
            dt = dt.astimezone(timezone.utc)
        return dt.isoformat()

    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None

    try:
        return datetime.fromtimestamp(numeric, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def _ensure_credentials(url: str, key: str) -> None:
    if _is_placeholder(url) or _is_placeholder(key):
        raise SupabaseConfigurationError(
            "Supabase credentials missing. Set SUPABASE_URL and the Supabase keys."
        )


def _get_client(url: str, key: str) -> Client:
    """Return a cached Supabase client, creating it if necessary."""

    _ensure_credentials(url, key)

    global _cached_client, _client_signature
    with _client_lock:
        signature = (url, key)
        if _cached_client is None or _client_signature != signature:
            try:
                _cached_client = create_client(url, key)
                _client_signature = signature
            except Exception as exc:  # pragma: no cover - depends on real network/config
                raise SupabaseOperationError(
                    f"Could not initialize the Supabase client: {exc}"
                ) from exc
    return _cached_client


def _new_client(url: str, key: str) -> Client:
    """Return a fresh, uncached client.

    Auth calls keep their session on the client object, so every sign-in gets
    its own instance instead of the shared one.
    """

    _ensure_credentials(url, key)
    try:
        return create_client(url, key)
    except Exception as exc:  # pragma: no cover - depends on real network/config
        raise SupabaseOperationError(
            f"Could not initialize the Supabase client: {exc}"
        ) from exc


@dataclass
class ProfileRecord:
    id: Optional[str]
    email: Optional[str]
    name: Optional[str]
    mobile_number: Optional[str]
    department: Optional[str]
    role: Optional[str]
    subjects: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "ProfileRecord":
        return cls(
            id=data.get("id"),
            email=data.get("email"),
            name=data.get("name"),
            mobile_number=data.get("mobile_number"),
            department=data.get("department"),
            role=(data.get("role") or "").strip().lower() or None,
            subjects=data.get("subjects"),
            created_at=_normalize_timestamp(data.get("created_at")),
            updated_at=_normalize_timestamp(data.get("updated_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class NoteRecord:
    id: Optional[str]
    title: Optional[str]
    file_url: Optional[str]
    file_name: Optional[str]
    department: Optional[str]
    subject: Optional[str]
    faculty_id: Optional[str]
    created_at: Optional[str]
    updated_at: Optional[str]
    faculty_name: Optional[str] = None
    faculty_email: Optional[str] = None

    @classmethod
    def from_raw(cls, data: Dict[str, Any]) -> "NoteRecord":
        # The uploader embed comes back as a dict, or a one-item list on some
        # PostgREST versions.
        embed = data.get("profiles")
        if isinstance(embed, list):
            embed = embed[0] if embed else None
        if not isinstance(embed, dict):
            embed = {}
        return cls(
            id=data.get("id"),
            title=data.get("title"),
            file_url=data.get("file_url"),
            file_name=data.get("file_name"),
            department=data.get("department"),
            subject=data.get("subject"),
            faculty_id=data.get("faculty_id"),
            created_at=_normalize_timestamp(data.get("created_at")),
            updated_at=_normalize_timestamp(data.get("updated_at")),
            faculty_name=embed.get("name"),
            faculty_email=embed.get("email"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _handle_api_error(error: APIError) -> SupabaseError:
    message = error.message or "Supabase error"
    details = (error.details or "").lower()
    combined = f"{message} {details}".lower()
    if error.code == "23505" or "duplicate" in combined or "already exists" in combined:
        return SupabaseUserExistsError("Record already exists in Supabase.")
    if error.code in ("42501", "PGRST301") or "permission denied" in combined:
        return SupabaseAuthError(message)
    return SupabaseOperationError(message)


def _handle_auth_error(error: Exception) -> SupabaseError:
    """Translate Supabase Auth exceptions, which do not share APIError's shape."""

    message = str(getattr(error, "message", None) or error or "Supabase Auth error")
    lowered = message.lower()
    if "already registered" in lowered or "already exists" in lowered:
        return SupabaseUserExistsError("User already registered.")
    if "not confirmed" in lowered:
        return SupabaseEmailNotConfirmedError(message)
    status = getattr(error, "status", None)
    if (
        "invalid login credentials" in lowered
        or "invalid" in lowered and "token" in lowered
        or "session" in lowered and ("missing" in lowered or "expired" in lowered)
        or status in (400, 401, 403)
    ):
        return SupabaseAuthError(message)
    return SupabaseOperationError(message)


def reset_cached_client() -> None:
    """Clear the cached Supabase client (useful for tests)."""

    global _cached_client, _client_signature
    with _client_lock:
        _cached_client = None
        _client_signature = None


__all__ = [
    "SupabaseError",
    "SupabaseConfigurationError",
    "SupabaseUserExistsError",
    "SupabaseAuthError",
    "SupabaseEmailNotConfirmedError",
    "SupabaseOperationError",
    "ProfileRecord",
    "NoteRecord",
    "_get_client",
    "_new_client",
    "_handle_api_error",
    "_handle_auth_error",
    "_normalize_login",
    "_normalize_timestamp",
    "_now_iso",
    "reset_cached_client",
]
