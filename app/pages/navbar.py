"""Top navigation bar."""

from __future__ import annotations

from dataclasses import dataclass

import gradio as gr

from app.config import APP_NAME
from app.utils import _display_name, _is_admin, _is_authenticated


@dataclass
class NavbarViews:
    header: gr.Markdown
    btn_home: gr.Button
    btn_about: gr.Button
    btn_notes: gr.Button
    btn_admin: gr.Button
    btn_profile: gr.Button
    btn_logout: gr.Button
    btn_login: gr.Button
    btn_signup: gr.Button


def build_navbar(*, blocks: gr.Blocks) -> NavbarViews:
    with gr.Row(equal_height=True):
        header = gr.Markdown(f"## 📚 {APP_NAME}")
        btnHome = gr.Button("Home", size="sm")
        btnAbout = gr.Button("About", size="sm")
        btnNotes = gr.Button("Notes", size="sm", visible=False)
        btnAdmin = gr.Button("Admin", size="sm", visible=False)
        btnProfile = gr.Button("👤 Profile", size="sm", visible=False)
        btnLogout = gr.Button("Logout", size="sm", visible=False)
        btnLogin = gr.Button("Login", size="sm")
        btnSignup = gr.Button("Sign Up", size="sm", variant="primary")

    return NavbarViews(
        header=header,
        btn_home=btnHome,
        btn_about=btnAbout,
        btn_notes=btnNotes,
        btn_admin=btnAdmin,
        btn_profile=btnProfile,
        btn_logout=btnLogout,
        btn_login=btnLogin,
        btn_signup=btnSignup,
    )


def navbar_updates(auth):
    """Visibility for (notes, admin, profile, logout, login, signup)."""

    signed_in = _is_authenticated(auth)
    profile_label = f"👤 {_display_name(auth)}" if signed_in else "👤 Profile"
    return (
        gr.update(visible=signed_in),
        gr.update(visible=signed_in and _is_admin(auth)),
        gr.update(visible=signed_in, value=profile_label),
        gr.update(visible=signed_in),
        gr.update(visible=not signed_in),
        gr.update(visible=not signed_in),
    )


__all__ = ["NavbarViews", "build_navbar", "navbar_updates"]
