"""Note metadata rows in the ``notes`` table.

Roles: students and faculty read their department's notes, faculty insert
their own, administrators list and delete everything.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

from .common import (
    NoteRecord,
    SupabaseOperationError,
    _get_client,
    _handle_api_error,
)

# Embeds the uploader profile through the faculty_id foreign key.
NOTE_SELECT = "*, profiles:faculty_id (name, email)"


def list_notes(
    url: str,
    key: str,
    *,
    department: Optional[str] = None,
    table: str = "notes",
) -> List[NoteRecord]:
    """Return notes newest first, optionally restricted to one department."""

    client = _get_client(url, key)
    try:
        query = client.table(table).select(NOTE_SELECT)
        if department is not None:
            query = query.eq("department", department)
        response = query.order("created_at", desc=True).execute()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc

    return [NoteRecord.from_raw(row) for row in response.data or []]


def create_note_record(
    url: str,
    key: str,
    *,
    title: str,
    subject: str,
    file_url: str,
    file_name: str,
    department: str,
    faculty_id: str,
    table: str = "notes",
) -> NoteRecord:
    """Insert the metadata row pointing at an uploaded file."""

    if not faculty_id:
        raise SupabaseOperationError("Missing faculty id for note creation.")
    if not file_url:
        raise SupabaseOperationError("Missing storage path for note creation.")

    payload: Dict[str, Any] = {
        "title": (title or "").strip(),
        "subject": (subject or "").strip(),
        "file_url": file_url,
        "file_name": file_name,
        "department": department,
        "faculty_id": faculty_id,
    }

    client = _get_client(url, key)
    try:
        response = client.table(table).insert(payload).execute()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc

    data = response.data or [payload]
    return NoteRecord.from_raw(data[0])


def delete_note_record(url: str, key: str, *, note_id: str, table: str = "notes") -> None:
    if not note_id:
        raise SupabaseOperationError("Missing note id for deletion.")

    client = _get_client(url, key)
    try:
        client.table(table).delete().eq("id", note_id).execute()
    except APIError as err:
        raise _handle_api_error(err) from err
    except Exception as exc:
        raise SupabaseOperationError(str(exc)) from exc


__all__ = ["NOTE_SELECT", "list_notes", "create_note_record", "delete_note_record"]
