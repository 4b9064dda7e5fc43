"""Authentication views and session state handling."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import gradio as gr

from services.supabase_client import (
    AuthSession,
    SupabaseAuthError,
    SupabaseConfigurationError,
    SupabaseEmailNotConfirmedError,
    SupabaseOperationError,
    SupabaseUserExistsError,
    create_profile,
    fetch_profile,
    restore_user_session,
    sign_in_user,
    sign_out_user,
    sign_up_user,
)

from app.config import (
    MIN_PASSWORD_LENGTH,
    ROLE_BY_LABEL,
    ROLE_FACULTY,
    ROLE_LABELS,
    SIGNUP_ROLES,
    SUPABASE_ANON_KEY,
    SUPABASE_PROFILES_TABLE,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from app.utils import _auth_user_id, _empty_auth, _is_authenticated

CONFIG_WARNING = (
    "Warning: Configure SUPABASE_URL, SUPABASE_ANON_KEY and "
    "SUPABASE_SERVICE_ROLE_KEY before signing in."
)


@dataclass
class AuthViews:
    view_login: gr.Column
    view_signup: gr.Column
    login_email: gr.Textbox
    login_password: gr.Textbox
    btn_login: gr.Button
    btn_go_signup: gr.Button
    login_msg: gr.Markdown
    signup_email: gr.Textbox
    signup_password: gr.Textbox
    signup_confirm: gr.Textbox
    signup_name: gr.Textbox
    signup_mobile: gr.Textbox
    signup_department: gr.Textbox
    signup_role: gr.Radio
    signup_subjects: gr.Textbox
    btn_signup: gr.Button
    btn_go_login: gr.Button
    signup_msg: gr.Markdown


def initial_auth_state() -> Dict[str, Any]:
    """State before the page load hook has resolved the session."""
    state = _empty_auth()
    state["resolved"] = False
    return state


def build_auth_views(*, blocks: gr.Blocks) -> AuthViews:
    """Create the login and sign-up sections."""

    with gr.Column(visible=False) as viewLogin:
        gr.Markdown("## 🔐 Sign in to your account")
        loginEmail = gr.Textbox(label="Email address", placeholder="you@college.edu")
        loginPassword = gr.Textbox(label="Password", type="password", placeholder="••••••••")
        with gr.Row():
            btnLogin = gr.Button("Sign In", variant="primary")
            btnGoSignup = gr.Button("Create an account")
        loginMsg = gr.Markdown("")

    with gr.Column(visible=False) as viewSignup:
        gr.Markdown("## 📝 Create your account")
        with gr.Row():
            signupEmail = gr.Textbox(label="Email address *", placeholder="you@college.edu")
            signupName = gr.Textbox(label="Full name *", placeholder="e.g. Priya Sharma")
        with gr.Row():
            signupPassword = gr.Textbox(label="Password *", type="password")
            signupConfirm = gr.Textbox(label="Confirm password *", type="password")
        with gr.Row():
            signupMobile = gr.Textbox(label="Mobile number", placeholder="optional")
            signupDepartment = gr.Textbox(label="Department *", placeholder="e.g. Computer Science")
        signupRole = gr.Radio(
            choices=[ROLE_LABELS[role] for role in SIGNUP_ROLES],
            value=ROLE_LABELS[SIGNUP_ROLES[0]],
            label="Role *",
        )
        signupSubjects = gr.Textbox(
            label="Subjects taught",
            placeholder="List the subjects you teach",
            lines=2,
            visible=False,
        )
        with gr.Row():
            btnSignup = gr.Button("Sign Up", variant="primary")
            btnGoLogin = gr.Button("Already have an account? Sign in")
        signupMsg = gr.Markdown("")

    signupRole.change(signup_role_change, inputs=signupRole, outputs=signupSubjects)

    return AuthViews(
        view_login=viewLogin,
        view_signup=viewSignup,
        login_email=loginEmail,
        login_password=loginPassword,
        btn_login=btnLogin,
        btn_go_signup=btnGoSignup,
        login_msg=loginMsg,
        signup_email=signupEmail,
        signup_password=signupPassword,
        signup_confirm=signupConfirm,
        signup_name=signupName,
        signup_mobile=signupMobile,
        signup_department=signupDepartment,
        signup_role=signupRole,
        signup_subjects=signupSubjects,
        btn_signup=btnSignup,
        btn_go_login=btnGoLogin,
        signup_msg=signupMsg,
    )


def _role_from_label(label: Optional[str]) -> Optional[str]:
    text = (label or "").strip().lower()
    role = ROLE_BY_LABEL.get(text, text)
    return role if role in SIGNUP_ROLES else None


def signup_role_change(role_label):
    return gr.update(visible=_role_from_label(role_label) == ROLE_FACULTY)


def _load_profile(user_id: str) -> Optional[Dict[str, Any]]:
    record = fetch_profile(
        SUPABASE_URL,
        SUPABASE_SERVICE_ROLE_KEY,
        user_id=user_id,
        table=SUPABASE_PROFILES_TABLE,
    )
    return record.to_dict() if record else None


def _state_from_session(session: AuthSession, profile: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "resolved": True,
        "isAuth": True,
        "user_id": session.user_id,
        "email": session.email,
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "profile": profile,
    }


def doLogin(email, password, authState):
    login = (email or "").strip().lower()
    pw = password or ""
    if not login or not pw:
        return gr.update(value="Warning: Enter your email and password."), authState

    try:
        session = sign_in_user(SUPABASE_URL, SUPABASE_ANON_KEY, email=login, password=pw)
        profile = _load_profile(session.user_id)
    except SupabaseConfigurationError:
        print("[AUTH] doLogin: Supabase configuration missing")
        return gr.update(value=CONFIG_WARNING), authState
    except SupabaseEmailNotConfirmedError:
        print(f"[AUTH] doLogin: email not confirmed -> {login}")
        return (
            gr.update(value="Warning: Confirm your email address, then sign in again."),
            authState,
        )
    except SupabaseAuthError as err:
        print(f"[AUTH] doLogin: rejected -> {login}: {err}")
        return gr.update(value="ERROR: Invalid email or password."), authState
    except SupabaseOperationError as err:
        print(f"[AUTH] doLogin: Supabase error -> {err}")
        gr.Warning(f"Sign in failed: {err}")
        return gr.update(value=f"ERROR: Sign in failed: {err}"), authState

    authState = _state_from_session(session, profile)
    if profile is None:
        print(f"[AUTH] doLogin: no profile for user {session.user_id}")
        return (
            gr.update(value="Warning: Signed in, but your profile could not be found."),
            authState,
        )

    print(f"[AUTH] doLogin: success -> user={session.user_id} role={profile.get('role')}")
    return gr.update(value=f"OK: Welcome back, **{profile.get('name') or login}**."), authState


def validate_signup(email, password, confirm_password, name, department, role_label) -> Optional[str]:
    """Return a warning message when the sign-up form is incomplete."""

    if not (email or "").strip() or not password or not confirm_password:
        return "Warning: Enter your email, password and password confirmation."
    if not (name or "").strip() or not (department or "").strip():
        return "Warning: Enter your full name and department."
    if _role_from_label(role_label) is None:
        return "Warning: Choose a valid role."
    if password != confirm_password:
        return "Warning: Passwords do not match."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Warning: Password must be at least {MIN_PASSWORD_LENGTH} characters."
    return None


def doRegister(
    email,
    password,
    confirm_password,
    name,
    mobile_number,
    department,
    role_label,
    subjects,
    authState,
):
    login = (email or "").strip().lower()
    role = _role_from_label(role_label)
    print(f"[AUTH] doRegister: email='{login}' role='{role}'")

    warning = validate_signup(email, password, confirm_password, name, department, role_label)
    if warning:
        return gr.update(value=warning), authState

    try:
        session = sign_up_user(
            SUPABASE_URL,
            SUPABASE_ANON_KEY,
            email=login,
            password=password,
            metadata={"name": name.strip(), "role": role},
        )
        record = create_profile(
            SUPABASE_URL,
            SUPABASE_SERVICE_ROLE_KEY,
            user_id=session.user_id,
            email=login,
            name=name,
            department=department,
            role=role,
            mobile_number=mobile_number,
            subjects=subjects if role == ROLE_FACULTY else None,
            table=SUPABASE_PROFILES_TABLE,
        )
    except SupabaseConfigurationError:
        print("[AUTH] doRegister: Supabase configuration missing")
        return gr.update(value=CONFIG_WARNING), authState
    except SupabaseUserExistsError:
        print(f"[AUTH] doRegister: user already exists -> {login}")
        return gr.update(value="Warning: This email is already registered."), authState
    except (SupabaseAuthError, SupabaseOperationError) as err:
        print(f"[AUTH] doRegister: Supabase error -> {err}")
        gr.Warning(f"Sign up failed: {err}")
        return gr.update(value=f"ERROR: Sign up failed: {err}"), authState

    if not session.access_token:
        # Project requires e-mail confirmation before the first sign-in.
        return (
            gr.update(value="OK: Account created! Check your email to confirm it, then sign in."),
            authState,
        )

    print(f"[AUTH] doRegister: signed in -> user={session.user_id}")
    return (
        gr.update(value=f"OK: Account created. Welcome, **{record.name or login}**!"),
        _state_from_session(session, record.to_dict()),
    )


def _doLogout(authState):
    print("[AUTH] logout")
    if _is_authenticated(authState):
        try:
            sign_out_user(
                SUPABASE_URL,
                SUPABASE_ANON_KEY,
                access_token=authState.get("access_token"),
                refresh_token=authState.get("refresh_token"),
            )
        except (SupabaseConfigurationError, SupabaseAuthError, SupabaseOperationError) as err:
            # The local session is dropped even if the platform call fails.
            print(f"[AUTH] logout: sign out failed -> {err}")
    return _empty_auth()


def session_tokens(authState) -> Dict[str, Optional[str]]:
    """Tokens kept in browser storage so a reload can restore the session."""

    if not _is_authenticated(authState):
        return {"access_token": None, "refresh_token": None}
    return {
        "access_token": authState.get("access_token"),
        "refresh_token": authState.get("refresh_token"),
    }


def restore_session(storedTokens):
    """Resolve the session state on page load from the browser-stored tokens."""

    stored = dict(storedTokens or {})
    access_token = stored.get("access_token")
    refresh_token = stored.get("refresh_token")
    if not access_token or not refresh_token:
        return _empty_auth()

    try:
        session = restore_user_session(
            SUPABASE_URL,
            SUPABASE_ANON_KEY,
            access_token=access_token,
            refresh_token=refresh_token,
        )
        profile = _load_profile(session.user_id)
    except (SupabaseConfigurationError, SupabaseAuthError, SupabaseOperationError) as err:
        print(f"[AUTH] restore_session: dropping stored session -> {err}")
        return _empty_auth()

    return _state_from_session(session, profile)


def refresh_profile(authState) -> Tuple[Dict[str, Any], Optional[str]]:
    """Re-fetch the signed-in user's profile into the state.

    Returns the new state and an error message, if any.
    """

    user_id = _auth_user_id(authState)
    if not user_id:
        return authState, None
    try:
        profile = _load_profile(user_id)
    except (SupabaseConfigurationError, SupabaseAuthError, SupabaseOperationError) as err:
        print(f"[AUTH] refresh_profile: Supabase error -> {err}")
        return authState, str(err)
    state = dict(authState)
    state["profile"] = profile
    return state, None


def clear_password_fields():
    return gr.update(value=""), gr.update(value=""), gr.update(value="")


__all__ = [
    "AuthViews",
    "build_auth_views",
    "initial_auth_state",
    "signup_role_change",
    "validate_signup",
    "doLogin",
    "doRegister",
    "_doLogout",
    "restore_session",
    "session_tokens",
    "refresh_profile",
    "clear_password_fields",
]
