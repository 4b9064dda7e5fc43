"""Admin dashboard: statistics plus user and note management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import gradio as gr

from services.supabase_client import (
    NoteRecord,
    ProfileRecord,
    SupabaseAuthError,
    SupabaseConfigurationError,
    SupabaseOperationError,
    SupabaseUserExistsError,
    delete_file_from_bucket,
    delete_note_record,
    delete_profile,
    list_notes,
    list_profiles,
)

from app.config import (
    ROLE_FACULTY,
    ROLE_LABELS,
    ROLE_STUDENT,
    ROLES,
    SUPABASE_NOTES_BUCKET,
    SUPABASE_NOTES_TABLE,
    SUPABASE_PROFILES_TABLE,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from app.pages.listing_shared import prepare_listing
from app.utils import _auth_user_id, _contains, _format_date, _is_admin

USERS_TABLE_HEADERS = ("Name", "Email", "Role", "Department", "Created")
ADMIN_NOTES_TABLE_HEADERS = ("Title", "File", "Faculty", "Department", "Subject", "Uploaded")

ACCESS_DENIED = "Warning: You don't have permission to access this page."
CONFIG_WARNING = "Warning: Configure SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to manage the platform."
SUPABASE_ERRORS = (
    SupabaseConfigurationError,
    SupabaseAuthError,
    SupabaseOperationError,
    SupabaseUserExistsError,
)


@dataclass
class AdminViews:
    container: gr.Column
    users_state: gr.State
    notes_state: gr.State
    stats: gr.Markdown
    search: gr.Textbox
    filter_role: gr.Dropdown
    filter_department: gr.Textbox
    btn_refresh: gr.Button
    users_table: gr.Dataframe
    users_info: gr.Markdown
    user_select: gr.Dropdown
    confirm_user: gr.Checkbox
    btn_delete_user: gr.Button
    notes_table: gr.Dataframe
    notes_info: gr.Markdown
    note_select: gr.Dropdown
    confirm_note: gr.Checkbox
    btn_delete_note: gr.Button
    message: gr.Markdown


def user_matches(user: ProfileRecord, search: Optional[str], role: Optional[str], department: Optional[str]) -> bool:
    """Search covers name, email and department; role is exact; department is containment."""

    query = (search or "").strip()
    matches_search = (
        not query
        or (bool(user.name) and _contains(user.name, query))
        or _contains(user.email, query)
        or _contains(user.department, query)
    )
    matches_role = not role or user.role == role
    matches_department = not department or _contains(user.department, department)
    return matches_search and matches_role and matches_department


def admin_note_matches(note: NoteRecord, search: Optional[str], department: Optional[str]) -> bool:
    query = (search or "").strip()
    matches_search = (
        not query
        or _contains(note.title, query)
        or _contains(note.subject, query)
        or (bool(note.faculty_name) and _contains(note.faculty_name, query))
    )
    matches_department = not department or _contains(note.department, department)
    return matches_search and matches_department


def admin_stats_md(users: Optional[List[ProfileRecord]], notes: Optional[List[NoteRecord]]) -> str:
    users = users or []
    students = sum(1 for user in users if user.role == ROLE_STUDENT)
    faculty = sum(1 for user in users if user.role == ROLE_FACULTY)
    return (
        "| 👥 Total Users | 🎓 Students | 👩‍🏫 Faculty | 📄 Total Notes |\n"
        "|---|---|---|---|\n"
        f"| {len(users)} | {students} | {faculty} | {len(notes or [])} |"
    )


def _user_row(user: ProfileRecord) -> List[str]:
    return [
        user.name or "—",
        user.email or "—",
        ROLE_LABELS.get(user.role or "", user.role or "—"),
        user.department or "—",
        _format_date(user.created_at),
    ]


def _admin_note_row(note: NoteRecord) -> List[str]:
    return [
        note.title or "—",
        note.file_name or "—",
        note.faculty_name or "Unknown",
        note.department or "—",
        note.subject or "—",
        _format_date(note.created_at),
    ]


def _filters_active(*values) -> bool:
    return any((value or "").strip() for value in values)


def admin_filter_users(users, search, role, department):
    empty_message = (
        "Info: No users match your current filters."
        if _filters_active(search, role, department)
        else "Info: No users have been created yet."
    )
    table_update, _filtered, dropdown_update, message, _default = prepare_listing(
        users,
        column_labels=USERS_TABLE_HEADERS,
        filter_fn=lambda user: user_matches(user, search, role, department),
        row_fn=_user_row,
        dropdown_label=lambda user: f"{user.name or '—'} <{user.email or '?'}> ({user.role or '?'})",
        empty_message=empty_message,
        found_message="OK: {count} user(s) found.",
    )
    return table_update, dropdown_update, message


def admin_filter_notes(notes, search, department):
    empty_message = (
        "Info: No notes match your current filters."
        if _filters_active(search, department)
        else "Info: No notes have been created yet."
    )
    table_update, _filtered, dropdown_update, message, _default = prepare_listing(
        notes,
        column_labels=ADMIN_NOTES_TABLE_HEADERS,
        filter_fn=lambda note: admin_note_matches(note, search, department),
        row_fn=_admin_note_row,
        dropdown_label=lambda note: f"{note.title or 'Untitled'} ({note.department or '—'})",
        empty_message=empty_message,
        found_message="OK: {count} note(s) found.",
    )
    return table_update, dropdown_update, message


def _empty_admin(message: str):
    return (
        [],
        [],
        admin_stats_md([], []),
        gr.update(value=[]),
        gr.update(choices=[], value=None),
        "",
        gr.update(value=[]),
        gr.update(choices=[], value=None),
        "",
        message,
    )


def admin_refresh(auth, search, role, department):
    """Fetch every profile and note, then apply the current filters."""

    if not _is_admin(auth):
        return _empty_admin(ACCESS_DENIED)

    try:
        users = list_profiles(
            SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, table=SUPABASE_PROFILES_TABLE
        )
        notes = list_notes(
            SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, table=SUPABASE_NOTES_TABLE
        )
    except SupabaseConfigurationError:
        return _empty_admin(CONFIG_WARNING)
    except SUPABASE_ERRORS as err:
        print(f"[ADMIN] admin_refresh: Supabase error -> {err}")
        return _empty_admin(f"ERROR: Error loading dashboard data: {err}")

    users_table, users_dropdown, users_info = admin_filter_users(users, search, role, department)
    notes_table, notes_dropdown, notes_info = admin_filter_notes(notes, search, department)
    return (
        users,
        notes,
        admin_stats_md(users, notes),
        users_table,
        users_dropdown,
        users_info,
        notes_table,
        notes_dropdown,
        notes_info,
        "",
    )


def admin_delete_user(auth, user_id, confirmed, users):
    """Returns (users, notice, confirmation reset)."""

    users = list(users or [])
    if not _is_admin(auth):
        return users, ACCESS_DENIED, gr.update(value=False)
    if not user_id:
        return users, "Warning: Select a user.", gr.update()
    if not confirmed:
        return users, "Warning: Tick the confirmation box to delete this user.", gr.update()
    if user_id == _auth_user_id(auth):
        return users, "Warning: You cannot delete your own account.", gr.update(value=False)

    try:
        delete_profile(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            user_id=user_id,
            table=SUPABASE_PROFILES_TABLE,
        )
    except SupabaseConfigurationError:
        return users, CONFIG_WARNING, gr.update(value=False)
    except SUPABASE_ERRORS as err:
        print(f"[ADMIN] admin_delete_user: Supabase error -> {err}")
        gr.Warning("Error deleting user")
        return users, f"ERROR: Error deleting user: {err}", gr.update(value=False)

    print(f"[ADMIN] admin_delete_user: deleted {user_id}")
    gr.Info("User deleted successfully")
    remaining = [user for user in users if user.id != user_id]
    return remaining, "OK: User deleted successfully.", gr.update(value=False)


def admin_delete_note(auth, note_id, confirmed, notes):
    """Delete the note row, then its stored file. Returns (notes, notice, confirmation reset)."""

    notes = list(notes or [])
    if not _is_admin(auth):
        return notes, ACCESS_DENIED, gr.update(value=False)
    if not note_id:
        return notes, "Warning: Select a note.", gr.update()
    if not confirmed:
        return notes, "Warning: Tick the confirmation box to delete this note.", gr.update()

    target = next((note for note in notes if note.id == note_id), None)
    try:
        delete_note_record(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            note_id=note_id,
            table=SUPABASE_NOTES_TABLE,
        )
    except SupabaseConfigurationError:
        return notes, CONFIG_WARNING, gr.update(value=False)
    except SUPABASE_ERRORS as err:
        print(f"[ADMIN] admin_delete_note: Supabase error -> {err}")
        gr.Warning("Error deleting note")
        return notes, f"ERROR: Error deleting note: {err}", gr.update(value=False)

    notice = "OK: Note deleted successfully."
    if target and target.file_url:
        try:
            delete_file_from_bucket(
                SUPABASE_URL,
                SUPABASE_SERVICE_ROLE_KEY,
                bucket=SUPABASE_NOTES_BUCKET,
                storage_path=target.file_url,
            )
        except SUPABASE_ERRORS as err:
            print(f"[ADMIN] admin_delete_note: file left in storage '{target.file_url}' -> {err}")
            notice = f"OK: Note deleted. Warning: its file could not be removed: {err}"

    print(f"[ADMIN] admin_delete_note: deleted {note_id}")
    gr.Info("Note deleted successfully")
    remaining = [note for note in notes if note.id != note_id]
    return remaining, notice, gr.update(value=False)


def build_admin_view(*, blocks: gr.Blocks, auth_state: gr.State) -> AdminViews:
    users_state = gr.State([])
    notes_state = gr.State([])

    with gr.Column(visible=False) as viewAdmin:
        gr.Markdown("## 🛡️ Admin Dashboard\nManage users and notes across all departments")
        stats = gr.Markdown(admin_stats_md([], []))
        with gr.Row():
            search = gr.Textbox(label="Search", placeholder="Search users or notes...")
            filterRole = gr.Dropdown(
                choices=[("All Roles", "")] + [(ROLE_LABELS[r], r) for r in ROLES],
                value="",
                label="Role (users)",
            )
            filterDepartment = gr.Textbox(label="Department", placeholder="Filter by department...")
            btnRefresh = gr.Button("🔄 Refresh")
        message = gr.Markdown("")

        with gr.Tab("Users Management"):
            usersTable = gr.Dataframe(
                headers=list(USERS_TABLE_HEADERS),
                datatype=["str"] * len(USERS_TABLE_HEADERS),
                interactive=False,
                wrap=True,
            )
            usersInfo = gr.Markdown("")
            with gr.Row():
                userSelect = gr.Dropdown(choices=[], value=None, label="User")
                confirmUser = gr.Checkbox(label="I am sure I want to delete this user", value=False)
                btnDeleteUser = gr.Button("🗑️ Delete user", variant="stop")

        with gr.Tab("Notes Management"):
            notesTable = gr.Dataframe(
                headers=list(ADMIN_NOTES_TABLE_HEADERS),
                datatype=["str"] * len(ADMIN_NOTES_TABLE_HEADERS),
                interactive=False,
                wrap=True,
            )
            notesInfo = gr.Markdown("")
            with gr.Row():
                noteSelect = gr.Dropdown(choices=[], value=None, label="Note")
                confirmNote = gr.Checkbox(label="I am sure I want to delete this note", value=False)
                btnDeleteNote = gr.Button("🗑️ Delete note", variant="stop")

    views = AdminViews(
        container=viewAdmin,
        users_state=users_state,
        notes_state=notes_state,
        stats=stats,
        search=search,
        filter_role=filterRole,
        filter_department=filterDepartment,
        btn_refresh=btnRefresh,
        users_table=usersTable,
        users_info=usersInfo,
        user_select=userSelect,
        confirm_user=confirmUser,
        btn_delete_user=btnDeleteUser,
        notes_table=notesTable,
        notes_info=notesInfo,
        note_select=noteSelect,
        confirm_note=confirmNote,
        btn_delete_note=btnDeleteNote,
        message=message,
    )

    user_filter_inputs = [users_state, search, filterRole, filterDepartment]
    user_filter_outputs = [usersTable, userSelect, usersInfo]
    note_filter_inputs = [notes_state, search, filterDepartment]
    note_filter_outputs = [notesTable, noteSelect, notesInfo]

    for component in (search, filterDepartment):
        component.change(admin_filter_users, inputs=user_filter_inputs, outputs=user_filter_outputs)
        component.change(admin_filter_notes, inputs=note_filter_inputs, outputs=note_filter_outputs)
    filterRole.change(admin_filter_users, inputs=user_filter_inputs, outputs=user_filter_outputs)

    btnRefresh.click(
        admin_refresh,
        inputs=[auth_state, search, filterRole, filterDepartment],
        outputs=admin_refresh_outputs(views),
    )

    btnDeleteUser.click(
        admin_delete_user,
        inputs=[auth_state, userSelect, confirmUser, users_state],
        outputs=[users_state, message, confirmUser],
    ).then(
        admin_filter_users, inputs=user_filter_inputs, outputs=user_filter_outputs
    ).then(
        admin_stats_md, inputs=[users_state, notes_state], outputs=stats
    )

    btnDeleteNote.click(
        admin_delete_note,
        inputs=[auth_state, noteSelect, confirmNote, notes_state],
        outputs=[notes_state, message, confirmNote],
    ).then(
        admin_filter_notes, inputs=note_filter_inputs, outputs=note_filter_outputs
    ).then(
        admin_stats_md, inputs=[users_state, notes_state], outputs=stats
    )

    return views


def admin_refresh_outputs(views: AdminViews):
    return [
        views.users_state,
        views.notes_state,
        views.stats,
        views.users_table,
        views.user_select,
        views.users_info,
        views.notes_table,
        views.note_select,
        views.notes_info,
        views.message,
    ]


__all__ = [
    "ADMIN_NOTES_TABLE_HEADERS",
    "USERS_TABLE_HEADERS",
    "AdminViews",
    "build_admin_view",
    "admin_refresh_outputs",
    "user_matches",
    "admin_note_matches",
    "admin_stats_md",
    "admin_filter_users",
    "admin_filter_notes",
    "admin_refresh",
    "admin_delete_user",
    "admin_delete_note",
]
