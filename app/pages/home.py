"""Landing and About pages."""

from __future__ import annotations

from dataclasses import dataclass

import gradio as gr

from app.config import APP_NAME
from app.utils import _display_name, _is_authenticated

ABOUT_MD = f"""
## About {APP_NAME}

### Our Mission
{APP_NAME} gives college students and faculty one secure place to share and
access academic notes, organised by department.

### Platform Capabilities
- **Role-Based Access Control**: students, faculty and administrators each see what they need.
- **Department Organization**: notes are scoped to the department of the faculty member who uploads them.
- **Advanced Search & Filtering**: find material by title, subject or faculty.

### For Students: Access & Download
- Browse notes from your department
- Search by faculty or subject
- Download materials for offline study
- View upload dates and organize by recency

### For Faculty: Upload & Manage
- Upload notes linked to your subjects
- Manage your uploaded content
- Update or remove materials as needed

### Built with
- **Interface**: Gradio
- **Backend**: Supabase for authentication, database and secure file storage
- **Security**: row-level security, private storage and authenticated downloads
"""


@dataclass
class HomeViews:
    view_home: gr.Column
    view_about: gr.Column
    greeting: gr.Markdown
    btn_get_started: gr.Button
    btn_sign_in: gr.Button
    btn_access_notes: gr.Button


def build_home_views(*, blocks: gr.Blocks) -> HomeViews:
    with gr.Column(visible=False) as viewHome:
        gr.Markdown(
            f"# Welcome to {APP_NAME}\n\n"
            "A centralized platform for college students and faculty to share and access "
            "academic notes securely. Streamline your learning experience with organized, "
            "department-specific educational resources."
        )
        greeting = gr.Markdown("")
        with gr.Row():
            btnGetStarted = gr.Button("Get Started", variant="primary")
            btnSignIn = gr.Button("Sign In")
            btnAccessNotes = gr.Button("Access Notes", variant="primary", visible=False)
        with gr.Row():
            gr.Markdown("### 📘 Organized Notes\nDepartment and subject-wise notes in one place.")
            gr.Markdown("### 👥 Role-Based Access\nStudents download, faculty upload, admins manage.")
            gr.Markdown("### 🛡️ Secure Storage\nFiles stay private to authenticated users.")

    with gr.Column(visible=False) as viewAbout:
        gr.Markdown(ABOUT_MD)

    return HomeViews(
        view_home=viewHome,
        view_about=viewAbout,
        greeting=greeting,
        btn_get_started=btnGetStarted,
        btn_sign_in=btnSignIn,
        btn_access_notes=btnAccessNotes,
    )


def home_cta_updates(auth):
    """Greeting and (get started, sign in, access notes) buttons."""

    signed_in = _is_authenticated(auth)
    greeting = f"### 👋 Hello, **{_display_name(auth)}**!" if signed_in else ""
    return (
        gr.update(value=greeting),
        gr.update(visible=not signed_in),
        gr.update(visible=not signed_in),
        gr.update(visible=signed_in),
    )


__all__ = ["ABOUT_MD", "HomeViews", "build_home_views", "home_cta_updates"]
