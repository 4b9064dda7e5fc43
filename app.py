"""Application entrypoint assembling Gradio layouts from modular pages."""

from __future__ import annotations

from dataclasses import dataclass

import gradio as gr

from app.config import APP_NAME, SESSION_STORAGE_KEY, SESSION_STORAGE_SECRET
from app.pages.admin import AdminViews, admin_refresh, admin_refresh_outputs, build_admin_view
from app.pages.auth import (
    AuthViews,
    _doLogout,
    build_auth_views,
    clear_password_fields,
    doLogin,
    doRegister,
    initial_auth_state,
    refresh_profile,
    restore_session,
    session_tokens,
)
from app.pages.guard import navigate
from app.pages.home import HomeViews, build_home_views, home_cta_updates
from app.pages.navbar import NavbarViews, build_navbar, navbar_updates
from app.pages.notes import NotesViews, build_notes_view, notes_refresh
from app.pages.profile import (
    ProfileViews,
    build_profile_view,
    profile_form_outputs,
    profile_form_values,
)


APP_CSS = """
.loading-view {
    min-height: 12rem;
    display: flex;
    align-items: center;
    justify-content: center;
}
"""


@dataclass
class AppViews:
    auth_state: gr.State
    route_state: gr.State
    session_store: gr.BrowserState
    navbar: NavbarViews
    loading: gr.Column
    home: HomeViews
    auth: AuthViews
    notes: NotesViews
    profile: ProfileViews
    admin: AdminViews


def build_views(demo: gr.Blocks) -> AppViews:
    auth_state = gr.State(initial_auth_state())
    route_state = gr.State("loading")
    session_store = gr.BrowserState(
        session_tokens(None),
        storage_key=SESSION_STORAGE_KEY,
        secret=SESSION_STORAGE_SECRET or None,
    )

    navbar = build_navbar(blocks=demo)

    with gr.Column(visible=True, elem_classes=["loading-view"]) as viewLoading:
        gr.Markdown("### ⏳ Loading...")

    return AppViews(
        auth_state=auth_state,
        route_state=route_state,
        session_store=session_store,
        navbar=navbar,
        loading=viewLoading,
        home=build_home_views(blocks=demo),
        auth=build_auth_views(blocks=demo),
        notes=build_notes_view(blocks=demo, auth_state=auth_state),
        profile=build_profile_view(blocks=demo, auth_state=auth_state),
        admin=build_admin_view(blocks=demo, auth_state=auth_state),
    )


def route_outputs(views: AppViews):
    # Page columns in the same order as guard.PAGES.
    return [
        views.route_state,
        views.loading,
        views.home.view_home,
        views.home.view_about,
        views.auth.view_login,
        views.auth.view_signup,
        views.notes.container,
        views.profile.container,
        views.admin.container,
        views.navbar.btn_notes,
        views.navbar.btn_admin,
        views.navbar.btn_profile,
        views.navbar.btn_logout,
        views.navbar.btn_login,
        views.navbar.btn_signup,
        views.home.greeting,
        views.home.btn_get_started,
        views.home.btn_sign_in,
        views.home.btn_access_notes,
    ]


def notes_entry_outputs(views: AppViews):
    notes = views.notes
    return [
        notes.notes_state,
        notes.header,
        notes.btn_show_upload,
        notes.filter_subject,
        notes.filter_faculty,
        notes.table,
        notes.note_select,
        notes.info,
    ]


def profile_entry_outputs(views: AppViews):
    return [views.auth_state, *profile_form_outputs(views.profile)]


def profile_chrome_outputs(views: AppViews):
    return [views.navbar.btn_profile, views.home.greeting]


def _route_to(page):
    def handler(auth):
        return (*navigate(page, auth), *navbar_updates(auth), *home_cta_updates(auth))

    return handler


def _route_after_register(auth):
    # Stays on the sign-up page until the account has a session.
    return _route_to("notes" if (auth or {}).get("isAuth") else "signup")(auth)


def _enter_notes(route, auth, notes, search, subject, faculty):
    if route != "notes":
        return (notes, *(gr.update() for _ in range(7)))
    return notes_refresh(auth, search, subject, faculty)


def _enter_profile(route, auth):
    if route != "profile":
        return (auth, *(gr.update() for _ in range(11)))
    auth, error = refresh_profile(auth)
    message = f"Warning: Showing cached profile data ({error})." if error else ""
    return (auth, *profile_form_values(auth, message=message))


def _enter_admin(route, auth, users, notes, search, role, department):
    if route != "admin":
        return (users, notes, *(gr.update() for _ in range(8)))
    return admin_refresh(auth, search, role, department)


def _profile_chrome(auth):
    """Navbar profile label and home greeting after the profile name changes."""
    return navbar_updates(auth)[2], home_cta_updates(auth)[0]


def _logout_cleanup():
    return (
        [],
        [],
        [],
        gr.update(visible=False, value=None),
        gr.update(visible=False),
        gr.update(value=""),
        gr.update(value=""),
    )


def build_app() -> gr.Blocks:
    with gr.Blocks(theme=gr.themes.Default(), title=APP_NAME, css=APP_CSS) as demo:
        views = build_views(demo)
        auth_state = views.auth_state
        route_state = views.route_state
        session_store = views.session_store
        navbar = views.navbar
        home_views = views.home
        auth_views = views.auth
        notes_view = views.notes
        admin_view = views.admin
        routed = route_outputs(views)

        def _after_route(event):
            return event.then(
                _enter_notes,
                inputs=[
                    route_state,
                    auth_state,
                    notes_view.notes_state,
                    notes_view.search,
                    notes_view.filter_subject,
                    notes_view.filter_faculty,
                ],
                outputs=notes_entry_outputs(views),
            ).then(
                _enter_profile,
                inputs=[route_state, auth_state],
                outputs=profile_entry_outputs(views),
            ).then(
                _enter_admin,
                inputs=[
                    route_state,
                    auth_state,
                    admin_view.users_state,
                    admin_view.notes_state,
                    admin_view.search,
                    admin_view.filter_role,
                    admin_view.filter_department,
                ],
                outputs=admin_refresh_outputs(admin_view),
            )

        def _link(button, page):
            _after_route(button.click(_route_to(page), inputs=auth_state, outputs=routed))

        # Navigation hooks --------------------------------------------------
        _link(navbar.btn_home, "home")
        _link(navbar.btn_about, "about")
        _link(navbar.btn_notes, "notes")
        _link(navbar.btn_admin, "admin")
        _link(navbar.btn_profile, "profile")
        _link(navbar.btn_login, "login")
        _link(navbar.btn_signup, "signup")
        _link(home_views.btn_get_started, "signup")
        _link(home_views.btn_sign_in, "login")
        _link(home_views.btn_access_notes, "notes")
        _link(auth_views.btn_go_signup, "signup")
        _link(auth_views.btn_go_login, "login")

        # Session restore on page load -------------------------------------
        _after_route(
            demo.load(restore_session, inputs=session_store, outputs=auth_state)
            .then(session_tokens, inputs=auth_state, outputs=session_store)
            .then(_route_to("home"), inputs=auth_state, outputs=routed)
        )

        # Authentication flows ---------------------------------------------
        password_fields = [
            auth_views.login_password,
            auth_views.signup_password,
            auth_views.signup_confirm,
        ]

        login_evt = (
            auth_views.btn_login.click(
                doLogin,
                inputs=[auth_views.login_email, auth_views.login_password, auth_state],
                outputs=[auth_views.login_msg, auth_state],
            )
            .then(clear_password_fields, outputs=password_fields)
            .then(session_tokens, inputs=auth_state, outputs=session_store)
        )
        _after_route(login_evt.then(_route_to("notes"), inputs=auth_state, outputs=routed))

        register_evt = (
            auth_views.btn_signup.click(
                doRegister,
                inputs=[
                    auth_views.signup_email,
                    auth_views.signup_password,
                    auth_views.signup_confirm,
                    auth_views.signup_name,
                    auth_views.signup_mobile,
                    auth_views.signup_department,
                    auth_views.signup_role,
                    auth_views.signup_subjects,
                    auth_state,
                ],
                outputs=[auth_views.signup_msg, auth_state],
            )
            .then(clear_password_fields, outputs=password_fields)
            .then(session_tokens, inputs=auth_state, outputs=session_store)
        )
        _after_route(register_evt.then(_route_after_register, inputs=auth_state, outputs=routed))

        # Profile name shown in the navbar and greeting -----------------------
        views.profile.save_event.then(
            _profile_chrome,
            inputs=auth_state,
            outputs=profile_chrome_outputs(views),
        )

        # Logout handling ---------------------------------------------------
        navbar.btn_logout.click(
            _doLogout,
            inputs=auth_state,
            outputs=auth_state,
        ).then(
            session_tokens,
            inputs=auth_state,
            outputs=session_store,
        ).then(
            _logout_cleanup,
            outputs=[
                notes_view.notes_state,
                admin_view.users_state,
                admin_view.notes_state,
                notes_view.download_button,
                notes_view.upload_panel,
                auth_views.login_msg,
                auth_views.signup_msg,
            ],
        ).then(
            _route_to("home"),
            inputs=auth_state,
            outputs=routed,
        )

        demo.queue()

    return demo


def launch():
    app = build_app()
    app.launch(debug=True)


if __name__ == "__main__":
    launch()
