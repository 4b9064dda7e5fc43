"""Single import point for the Supabase integrations used by the pages."""

from __future__ import annotations

from services.supabase.auth import (
    AuthSession,
    restore_user_session,
    sign_in_user,
    sign_out_user,
    sign_up_user,
)
from services.supabase.common import (
    NoteRecord,
    ProfileRecord,
    SupabaseAuthError,
    SupabaseConfigurationError,
    SupabaseEmailNotConfirmedError,
    SupabaseError,
    SupabaseOperationError,
    SupabaseUserExistsError,
    reset_cached_client,
)
from services.supabase.notes import create_note_record, delete_note_record, list_notes
from services.supabase.profiles import (
    EDITABLE_PROFILE_FIELDS,
    create_profile,
    delete_profile,
    fetch_profile,
    list_profiles,
    update_profile,
)
from services.supabase.storage import (
    delete_file_from_bucket,
    download_file_from_bucket,
    upload_file_to_bucket,
)

__all__ = [
    "AuthSession",
    "NoteRecord",
    "ProfileRecord",
    "SupabaseError",
    "SupabaseAuthError",
    "SupabaseConfigurationError",
    "SupabaseEmailNotConfirmedError",
    "SupabaseOperationError",
    "SupabaseUserExistsError",
    "EDITABLE_PROFILE_FIELDS",
    "create_note_record",
    "create_profile",
    "delete_file_from_bucket",
    "delete_note_record",
    "delete_profile",
    "download_file_from_bucket",
    "fetch_profile",
    "list_notes",
    "list_profiles",
    "reset_cached_client",
    "restore_user_session",
    "sign_in_user",
    "sign_out_user",
    "sign_up_user",
    "update_profile",
    "upload_file_to_bucket",
]
