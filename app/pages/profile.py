"""Profile page with an edit / save / cancel form."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import gradio as gr

from services.supabase_client import (
    SupabaseAuthError,
    SupabaseConfigurationError,
    SupabaseOperationError,
    update_profile,
)

from app.config import (
    ROLE_FACULTY,
    ROLE_LABELS,
    SUPABASE_PROFILES_TABLE,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from app.utils import _auth_profile, _auth_user_id, _format_date, _user_role


@dataclass
class ProfileViews:
    container: gr.Column
    header: gr.Markdown
    email: gr.Textbox
    name: gr.Textbox
    mobile_number: gr.Textbox
    department: gr.Textbox
    role: gr.Textbox
    subjects: gr.Textbox
    account_info: gr.Markdown
    btn_edit: gr.Button
    actions_row: gr.Row
    btn_save: gr.Button
    btn_cancel: gr.Button
    message: gr.Markdown
    # Last step of the save chain; callers chain their own refreshes onto it.
    save_event: Optional[Any] = None


def _account_info_md(profile: Dict[str, Any]) -> str:
    return (
        "#### Account Information\n"
        f"- Account created: {_format_date(profile.get('created_at'))}\n"
        f"- Last updated: {_format_date(profile.get('updated_at'))}"
    )


def profile_form_values(auth, *, editing: bool = False, message: str = ""):
    """Field values mirrored from the stored profile.

    Outputs: header, email, name, mobile, department, role, subjects,
    account info, edit button, actions row, message.
    """

    profile = _auth_profile(auth)
    role = _user_role(auth)
    role_label = ROLE_LABELS.get(role, role.capitalize() or "—")
    return (
        gr.update(value=f"## 👤 Profile\n_{role_label}_"),
        gr.update(value=profile.get("email") or (auth or {}).get("email") or ""),
        gr.update(value=profile.get("name") or "", interactive=editing),
        gr.update(value=profile.get("mobile_number") or "", interactive=editing),
        gr.update(value=profile.get("department") or "", interactive=editing),
        gr.update(value=role_label),
        gr.update(
            value=profile.get("subjects") or "",
            interactive=editing,
            visible=role == ROLE_FACULTY,
        ),
        gr.update(value=_account_info_md(profile)),
        gr.update(visible=not editing),
        gr.update(visible=editing),
        message,
    )


def profile_start_edit(auth):
    if not _auth_profile(auth):
        gr.Warning("Your profile is not loaded yet.")
        return profile_form_values(auth)
    return (
        gr.update(),
        gr.update(),
        gr.update(interactive=True),
        gr.update(interactive=True),
        gr.update(interactive=True),
        gr.update(),
        gr.update(interactive=True),
        gr.update(),
        gr.update(visible=False),
        gr.update(visible=True),
        "",
    )


def profile_cancel(auth):
    """Discard local edits and restore the stored values."""
    return profile_form_values(auth)


def collect_profile_updates(auth, name, mobile_number, department, subjects) -> Dict[str, Any]:
    updates: Dict[str, Any] = {
        "name": (name or "").strip(),
        "mobile_number": (mobile_number or "").strip(),
        "department": (department or "").strip(),
    }
    if _user_role(auth) == ROLE_FACULTY:
        updates["subjects"] = (subjects or "").strip()
    return updates


def profile_save(auth, name, mobile_number, department, subjects):
    """Send the partial update; returns (auth, *form outputs)."""

    def _still_editing(message: str):
        return (
            auth,
            gr.update(),
            gr.update(),
            gr.update(),
            gr.update(),
            gr.update(),
            gr.update(),
            gr.update(),
            gr.update(),
            gr.update(visible=False),
            gr.update(visible=True),
            message,
        )

    user_id = _auth_user_id(auth)
    if not user_id or not _auth_profile(auth):
        return _still_editing("Warning: Sign in to update your profile.")

    updates = collect_profile_updates(auth, name, mobile_number, department, subjects)
    if not updates["name"] or not updates["department"]:
        return _still_editing("Warning: Name and department cannot be empty.")

    try:
        record = update_profile(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            user_id=user_id,
            updates=updates,
            table=SUPABASE_PROFILES_TABLE,
        )
    except SupabaseConfigurationError:
        return _still_editing(
            "Warning: Configure SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY to update profiles."
        )
    except (SupabaseAuthError, SupabaseOperationError) as err:
        print(f"[PROFILE] profile_save: Supabase error -> {err}")
        gr.Warning(f"Error updating profile: {err}")
        return _still_editing(f"ERROR: Error updating profile: {err}")

    new_auth = dict(auth)
    new_auth["profile"] = record.to_dict()
    print(f"[PROFILE] profile_save: updated user {user_id}")
    return (new_auth, *profile_form_values(new_auth, message="OK: Profile updated."))


def build_profile_view(*, blocks: gr.Blocks, auth_state: gr.State) -> ProfileViews:
    with gr.Column(visible=False) as viewProfile:
        header = gr.Markdown("## 👤 Profile")
        email = gr.Textbox(label="Email Address", interactive=False, info="Email cannot be changed")
        with gr.Row():
            name = gr.Textbox(label="Full Name", interactive=False)
            mobile = gr.Textbox(label="Mobile Number", interactive=False)
        with gr.Row():
            department = gr.Textbox(label="Department", interactive=False)
            role = gr.Textbox(label="Role", interactive=False, info="Role cannot be changed")
        subjects = gr.Textbox(
            label="Subjects Taught",
            placeholder="List the subjects you teach",
            lines=3,
            interactive=False,
            visible=False,
        )
        btnEdit = gr.Button("✏️ Edit Profile")
        with gr.Row(visible=False) as actionsRow:
            btnCancel = gr.Button("Cancel")
            btnSave = gr.Button("💾 Save Changes", variant="primary")
        message = gr.Markdown("")
        accountInfo = gr.Markdown("")

    views = ProfileViews(
        container=viewProfile,
        header=header,
        email=email,
        name=name,
        mobile_number=mobile,
        department=department,
        role=role,
        subjects=subjects,
        account_info=accountInfo,
        btn_edit=btnEdit,
        actions_row=actionsRow,
        btn_save=btnSave,
        btn_cancel=btnCancel,
        message=message,
    )
    form_outputs = profile_form_outputs(views)

    btnEdit.click(profile_start_edit, inputs=auth_state, outputs=form_outputs)
    btnCancel.click(profile_cancel, inputs=auth_state, outputs=form_outputs)
    views.save_event = btnSave.click(
        lambda: gr.update(interactive=False, value="Saving..."),
        outputs=btnSave,
    ).then(
        profile_save,
        inputs=[auth_state, name, mobile, department, subjects],
        outputs=[auth_state, *form_outputs],
    ).then(
        lambda: gr.update(interactive=True, value="💾 Save Changes"),
        outputs=btnSave,
    )

    return views


def profile_form_outputs(views: ProfileViews):
    return [
        views.header,
        views.email,
        views.name,
        views.mobile_number,
        views.department,
        views.role,
        views.subjects,
        views.account_info,
        views.btn_edit,
        views.actions_row,
        views.message,
    ]


__all__ = [
    "ProfileViews",
    "build_profile_view",
    "profile_form_outputs",
    "profile_form_values",
    "profile_start_edit",
    "profile_cancel",
    "collect_profile_updates",
    "profile_save",
]
