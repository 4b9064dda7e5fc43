"""Profile records: creation at sign-up, lookup, self-service edits and admin removal.

Roles: every authenticated user for their own row; administrators for
listing and deletion.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from .common import (
    ProfileRecord,
    SupabaseOperationError,
    _get_client,
    _handle_api_error,
    _normalize_login,
    _now_iso,
)

PROFILE_COLUMNS = (
    "id,email,name,mobile_number,department,role,subjects,created_at,updated_at"
)

# Columns a user may change on their own profile. Role, id and email stay fixed.
EDITABLE_PROFILE_FIELDS = ("name", "mobile_number", "department", "subjects")


def fetch_profile(
    url: str,
    key: str,
    *,
    user_id: str,
    table: str = "profiles",
) -> Optional[ProfileRecord]:
    """Return the profile for an auth user id, or None when absent."""

    if not user_id:
        return None

    client = _get_client(url, key)
    try:
        response = (
            client.table(table)
            .select(PROFILE_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc

    data = response.data or []
    if data:
        return ProfileRecord.from_raw(data[0])
    return None


def create_profile(
    url: str,
    key: str,
    *,
    user_id: str,
    email: str,
    name: str,
    department: str,
    role: str,
    mobile_number: Optional[str] = None,
    subjects: Optional[str] = None,
    table: str = "profiles",
) -> ProfileRecord:
    """Insert the profile row that accompanies a new auth user."""

    if not user_id:
        raise SupabaseOperationError("Missing user id for profile creation.")

    payload: Dict[str, Any] = {
        "id": user_id,
        "email": _normalize_login(email),
        "name": (name or "").strip(),
        "department": (department or "").strip(),
        "role": (role or "").strip().lower(),
    }
    if mobile_number and mobile_number.strip():
        payload["mobile_number"] = mobile_number.strip()
    if subjects and subjects.strip():
        payload["subjects"] = subjects.strip()

    client = _get_client(url, key)
    try:
        response = client.table(table).insert(payload).execute()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc

    data = response.data or [payload]
    return ProfileRecord.from_raw(data[0])


def update_profile(
    url: str,
    key: str,
    *,
    user_id: str,
    updates: Dict[str, Any],
    table: str = "profiles",
) -> ProfileRecord:
    """Apply a partial update to the caller's own profile."""

    if not user_id:
        raise SupabaseOperationError("Missing user id for profile update.")

    payload: Dict[str, Any] = {
        field: updates[field] for field in EDITABLE_PROFILE_FIELDS if field in updates
    }
    if not payload:
        raise SupabaseOperationError("Nothing to update.")
    payload["updated_at"] = _now_iso()

    client = _get_client(url, key)
    try:
        response = client.table(table).update(payload).eq("id", user_id).execute()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc

    data = response.data or []
    if not data:
        raise SupabaseOperationError("Profile not found in Supabase.")
    return ProfileRecord.from_raw(data[0])


def list_profiles(url: str, key: str, *, table: str = "profiles") -> List[ProfileRecord]:
    """Return every profile, newest first."""

    client = _get_client(url, key)
    try:
        response = (
            client.table(table)
            .select(PROFILE_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc

    return [ProfileRecord.from_raw(row) for row in response.data or []]


def delete_profile(url: str, key: str, *, user_id: str, table: str = "profiles") -> None:
    if not user_id:
        raise SupabaseOperationError("Missing user id for profile deletion.")

    client = _get_client(url, key)
    try:
        client.table(table).delete().eq("id", user_id).execute()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc


__all__ = [
    "EDITABLE_PROFILE_FIELDS",
    "PROFILE_COLUMNS",
    "fetch_profile",
    "create_profile",
    "update_profile",
    "list_profiles",
    "delete_profile",
]
