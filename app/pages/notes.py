"""Department notes: listing, filtering, upload (faculty) and download."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from typing import List, Optional

import gradio as gr

from services.supabase_client import (
    NoteRecord,
    SupabaseAuthError,
    SupabaseConfigurationError,
    SupabaseOperationError,
    SupabaseUserExistsError,
    create_note_record,
    delete_file_from_bucket,
    download_file_from_bucket,
    list_notes,
    upload_file_to_bucket,
)

from app.config import (
    ALLOWED_NOTE_EXTENSIONS,
    SUPABASE_NOTES_BUCKET,
    SUPABASE_NOTES_TABLE,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from app.pages.listing_shared import prepare_listing
from app.utils import (
    _auth_profile,
    _auth_user_id,
    _contains,
    _format_date,
    _is_faculty,
    _now_ms,
    _unique_in_order,
)

NOTES_TABLE_HEADERS = ("Title", "Subject", "Faculty", "Uploaded", "File")

CONFIG_WARNING = "Warning: Configure SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to access notes."
SUPABASE_ERRORS = (
    SupabaseConfigurationError,
    SupabaseAuthError,
    SupabaseOperationError,
    SupabaseUserExistsError,
)


@dataclass
class NotesViews:
    container: gr.Column
    header: gr.Markdown
    notes_state: gr.State
    search: gr.Textbox
    filter_subject: gr.Dropdown
    filter_faculty: gr.Dropdown
    btn_refresh: gr.Button
    btn_show_upload: gr.Button
    table: gr.Dataframe
    info: gr.Markdown
    note_select: gr.Dropdown
    btn_prepare_download: gr.Button
    download_button: gr.DownloadButton
    upload_panel: gr.Column
    upload_title: gr.Textbox
    upload_subject: gr.Textbox
    upload_file: gr.File
    btn_upload: gr.Button
    btn_cancel_upload: gr.Button
    upload_msg: gr.Markdown


def note_matches(note: NoteRecord, search: Optional[str], subject: Optional[str], faculty: Optional[str]) -> bool:
    """Search covers title and faculty name; subject and faculty narrow further."""

    query = (search or "").strip()
    matches_search = not query or _contains(note.title, query) or (
        bool(note.faculty_name) and _contains(note.faculty_name, query)
    )
    matches_subject = not subject or _contains(note.subject, subject)
    matches_faculty = not faculty or (
        bool(note.faculty_name) and _contains(note.faculty_name, faculty)
    )
    return matches_search and matches_subject and matches_faculty


def _note_row(note: NoteRecord) -> List[str]:
    return [
        note.title or "—",
        note.subject or "—",
        note.faculty_name or "Unknown",
        _format_date(note.created_at),
        note.file_name or "—",
    ]


def _note_label(note: NoteRecord) -> str:
    return f"{note.title or 'Untitled'} ({note.subject or '—'}, {note.faculty_name or 'Unknown'})"


def subject_choices(notes: Optional[List[NoteRecord]]) -> List[str]:
    return _unique_in_order(note.subject for note in notes or [])


def faculty_choices(notes: Optional[List[NoteRecord]]) -> List[str]:
    return _unique_in_order(note.faculty_name for note in notes or [])


def _choices_update(options: List[str], current: Optional[str], all_label: str):
    choices = [(all_label, "")] + [(option, option) for option in options]
    value = current if current in options else ""
    return gr.update(choices=choices, value=value)


def notes_filter(notes, search, subject, faculty):
    """Return (table, dropdown of notes, info message) for the current filters."""

    empty_message = (
        "Info: No notes have been uploaded for your department yet."
        if not notes
        else "Info: No notes found. Try adjusting your search or filter criteria."
    )
    table_update, _filtered, dropdown_update, message, _default = prepare_listing(
        notes,
        column_labels=NOTES_TABLE_HEADERS,
        filter_fn=lambda note: note_matches(note, search, subject, faculty),
        row_fn=_note_row,
        dropdown_label=_note_label,
        empty_message=empty_message,
        found_message="OK: {count} note(s) found.",
    )
    return table_update, dropdown_update, message


def _empty_refresh(message: str):
    return (
        [],
        gr.update(value="## 📚 Academic Notes"),
        gr.update(visible=False),
        gr.update(choices=[("All Subjects", "")], value=""),
        gr.update(choices=[("All Faculty", "")], value=""),
        gr.update(value=[]),
        gr.update(choices=[], value=None),
        message,
    )


def notes_refresh(auth, search, subject, faculty):
    """Fetch the department's notes and re-apply the filters."""

    profile = _auth_profile(auth)
    department = (profile.get("department") or "").strip()
    if not _auth_user_id(auth):
        return _empty_refresh("Warning: Sign in to browse notes.")
    if not profile:
        return _empty_refresh("Warning: Your profile could not be loaded.")

    try:
        notes = list_notes(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            department=department,
            table=SUPABASE_NOTES_TABLE,
        )
    except SupabaseConfigurationError:
        return _empty_refresh(CONFIG_WARNING)
    except SUPABASE_ERRORS as err:
        print(f"[NOTES] notes_refresh: Supabase error -> {err}")
        return _empty_refresh(f"ERROR: Error fetching notes: {err}")

    subjects = subject_choices(notes)
    faculty_names = faculty_choices(notes)
    subject = subject if subject in subjects else ""
    faculty = faculty if faculty in faculty_names else ""
    table_update, dropdown_update, message = notes_filter(notes, search, subject, faculty)
    return (
        notes,
        gr.update(value=f"## 📚 Academic Notes\nDepartment: **{department or '—'}**"),
        gr.update(visible=_is_faculty(auth)),
        _choices_update(subjects, subject, "All Subjects"),
        _choices_update(faculty_names, faculty, "All Faculty"),
        table_update,
        dropdown_update,
        message,
    )


def notes_show_upload(auth):
    if not _is_faculty(auth):
        gr.Warning("Only faculty members can upload notes.")
        return gr.update(visible=False), ""
    return gr.update(visible=True), ""


def notes_hide_upload():
    """Close the upload panel and reset its fields."""
    return (
        gr.update(visible=False),
        gr.update(value=""),
        gr.update(value=""),
        gr.update(value=None),
        "",
    )


def _file_extension(file_name: str) -> str:
    # A name without a dot is its own extension.
    return file_name.rsplit(".", 1)[-1]


def validate_upload(title, subject, file_path) -> Optional[str]:
    """Return a warning when the upload form cannot be submitted."""

    if not (title or "").strip():
        return "Warning: Enter a title for the note."
    if not (subject or "").strip():
        return "Warning: Enter the subject of the note."
    if not file_path:
        return "Warning: Choose a file to upload."
    name = os.path.basename(str(file_path)).lower()
    if not name.endswith(ALLOWED_NOTE_EXTENSIONS):
        allowed = ", ".join(ext.lstrip(".").upper() for ext in ALLOWED_NOTE_EXTENSIONS)
        return f"Warning: Unsupported file type. Supported formats: {allowed}."
    return None


def build_storage_path(user_id: str, file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Storage objects live under the uploader's id with a timestamp-based name."""

    stamp = timestamp_ms if timestamp_ms is not None else _now_ms()
    return f"{user_id}/{stamp}.{_file_extension(file_name)}"


def notes_upload(auth, title, subject, file_path):
    """Upload the file, then insert the note row that references it.

    Returns (upload panel, title, subject, file, message). On success the
    panel closes and the fields reset.
    """

    keep = (gr.update(), gr.update(), gr.update(), gr.update())
    if not _is_faculty(auth):
        return (*keep, "Warning: Only faculty members can upload notes.")

    warning = validate_upload(title, subject, file_path)
    if warning:
        return (*keep, warning)

    profile = _auth_profile(auth)
    user_id = _auth_user_id(auth)
    file_name = os.path.basename(str(file_path))
    storage_path = build_storage_path(user_id, file_name)

    try:
        stored_path = upload_file_to_bucket(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            bucket=SUPABASE_NOTES_BUCKET,
            file_path=str(file_path),
            storage_path=storage_path,
        )
    except SUPABASE_ERRORS as err:
        print(f"[NOTES] notes_upload: upload failed -> {err}")
        gr.Warning(f"Error uploading note. Please try again. Details: {err}")
        return (*keep, f"ERROR: Error uploading note: {err}")

    try:
        record = create_note_record(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            title=title,
            subject=subject,
            file_url=stored_path,
            file_name=file_name,
            department=profile.get("department") or "",
            faculty_id=user_id,
            table=SUPABASE_NOTES_TABLE,
        )
    except SUPABASE_ERRORS as err:
        print(f"[NOTES] notes_upload: insert failed for '{stored_path}' -> {err}")
        _remove_orphan(stored_path)
        gr.Warning(f"Error uploading note. Please try again. Details: {err}")
        return (*keep, f"ERROR: Error uploading note: {err}")

    print(f"[NOTES] notes_upload: stored note {record.id} at '{stored_path}'")
    gr.Info("Note uploaded.")
    return (*notes_hide_upload()[:4], f"OK: Note **{record.title}** uploaded.")


def _remove_orphan(storage_path: str) -> None:
    try:
        delete_file_from_bucket(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            bucket=SUPABASE_NOTES_BUCKET,
            storage_path=storage_path,
        )
    except SUPABASE_ERRORS as err:
        print(f"[NOTES] orphaned file left in storage: '{storage_path}' -> {err}")


def _find_note(note_id, notes) -> Optional[NoteRecord]:
    return next((note for note in notes or [] if note.id == note_id), None)


def notes_prepare_download(note_id, notes):
    """Fetch the stored file and expose it under its original name."""

    hidden = gr.update(visible=False, value=None)
    note = _find_note(note_id, notes)
    if not note:
        gr.Warning("Select a note to download.")
        return hidden
    if not note.file_url:
        gr.Warning("This note has no file attached.")
        return hidden

    try:
        payload = download_file_from_bucket(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            bucket=SUPABASE_NOTES_BUCKET,
            storage_path=note.file_url,
        )
    except SUPABASE_ERRORS as err:
        print(f"[NOTES] notes_prepare_download: Supabase error -> {err}")
        gr.Warning("Error downloading file. Please try again.")
        return hidden

    file_name = os.path.basename(note.file_name or note.file_url)
    target = os.path.join(tempfile.mkdtemp(prefix="note-"), file_name)
    with open(target, "wb") as fh:
        fh.write(payload)

    return gr.update(visible=True, value=target, label=f"⬇️ Download {file_name}")


def build_notes_view(*, blocks: gr.Blocks, auth_state: gr.State) -> NotesViews:
    notes_state = gr.State([])

    with gr.Column(visible=False) as viewNotes:
        header = gr.Markdown("## 📚 Academic Notes")
        with gr.Row():
            search = gr.Textbox(label="Search", placeholder="Search notes or faculty...")
            filterSubject = gr.Dropdown(
                choices=[("All Subjects", "")], value="", label="Subject"
            )
            filterFaculty = gr.Dropdown(
                choices=[("All Faculty", "")], value="", label="Faculty"
            )
        with gr.Row():
            btnRefresh = gr.Button("🔄 Refresh")
            btnShowUpload = gr.Button("⬆️ Upload Note", variant="primary", visible=False)

        with gr.Column(visible=False) as uploadPanel:
            gr.Markdown("### Upload Note")
            uploadTitle = gr.Textbox(label="Title *", placeholder="Note title")
            uploadSubject = gr.Textbox(label="Subject *", placeholder="Subject name")
            uploadFile = gr.File(
                label="File *",
                file_types=list(ALLOWED_NOTE_EXTENSIONS),
                type="filepath",
            )
            gr.Markdown("_Supported formats: PDF, DOC, DOCX, PPT, PPTX, TXT_")
            with gr.Row():
                btnCancelUpload = gr.Button("Cancel")
                btnUpload = gr.Button("Upload", variant="primary")
        uploadMsg = gr.Markdown("")

        table = gr.Dataframe(
            headers=list(NOTES_TABLE_HEADERS),
            datatype=["str"] * len(NOTES_TABLE_HEADERS),
            interactive=False,
            wrap=True,
        )
        info = gr.Markdown("")
        with gr.Row():
            noteSelect = gr.Dropdown(choices=[], value=None, label="Note")
            btnPrepareDownload = gr.Button("📄 Get file")
        downloadButton = gr.DownloadButton("⬇️ Download", visible=False, variant="secondary")

    filter_inputs = [notes_state, search, filterSubject, filterFaculty]
    filter_outputs = [table, noteSelect, info]
    refresh_outputs = [
        notes_state,
        header,
        btnShowUpload,
        filterSubject,
        filterFaculty,
        table,
        noteSelect,
        info,
    ]

    search.change(notes_filter, inputs=filter_inputs, outputs=filter_outputs)
    filterSubject.change(notes_filter, inputs=filter_inputs, outputs=filter_outputs)
    filterFaculty.change(notes_filter, inputs=filter_inputs, outputs=filter_outputs)

    btnRefresh.click(
        notes_refresh,
        inputs=[auth_state, search, filterSubject, filterFaculty],
        outputs=refresh_outputs,
    )

    btnShowUpload.click(notes_show_upload, inputs=auth_state, outputs=[uploadPanel, uploadMsg])
    btnCancelUpload.click(
        notes_hide_upload,
        outputs=[uploadPanel, uploadTitle, uploadSubject, uploadFile, uploadMsg],
    )
    btnUpload.click(
        lambda: gr.update(interactive=False, value="Uploading..."),
        outputs=btnUpload,
    ).then(
        notes_upload,
        inputs=[auth_state, uploadTitle, uploadSubject, uploadFile],
        outputs=[uploadPanel, uploadTitle, uploadSubject, uploadFile, uploadMsg],
    ).then(
        lambda: gr.update(interactive=True, value="Upload"),
        outputs=btnUpload,
    ).then(
        notes_refresh,
        inputs=[auth_state, search, filterSubject, filterFaculty],
        outputs=refresh_outputs,
    )

    noteSelect.change(lambda _: gr.update(visible=False, value=None), inputs=noteSelect, outputs=downloadButton)
    btnPrepareDownload.click(
        notes_prepare_download,
        inputs=[noteSelect, notes_state],
        outputs=downloadButton,
    )

    return NotesViews(
        container=viewNotes,
        header=header,
        notes_state=notes_state,
        search=search,
        filter_subject=filterSubject,
        filter_faculty=filterFaculty,
        btn_refresh=btnRefresh,
        btn_show_upload=btnShowUpload,
        table=table,
        info=info,
        note_select=noteSelect,
        btn_prepare_download=btnPrepareDownload,
        download_button=downloadButton,
        upload_panel=uploadPanel,
        upload_title=uploadTitle,
        upload_subject=uploadSubject,
        upload_file=uploadFile,
        btn_upload=btnUpload,
        btn_cancel_upload=btnCancelUpload,
        upload_msg=uploadMsg,
    )


__all__ = [
    "NOTES_TABLE_HEADERS",
    "NotesViews",
    "build_notes_view",
    "note_matches",
    "notes_filter",
    "notes_refresh",
    "notes_show_upload",
    "notes_hide_upload",
    "validate_upload",
    "build_storage_path",
    "notes_upload",
    "notes_prepare_download",
    "subject_choices",
    "faculty_choices",
]
