import unittest
from unittest.mock import patch

import gradio as gr

from app.pages.auth import (
    _doLogout,
    doLogin,
    doRegister,
    initial_auth_state,
    refresh_profile,
    restore_session,
    session_tokens,
    signup_role_change,
    validate_signup,
)
from app.utils import _empty_auth
from services.supabase_client import (
    AuthSession,
    ProfileRecord,
    SupabaseAuthError,
    SupabaseConfigurationError,
    SupabaseEmailNotConfirmedError,
    SupabaseOperationError,
    SupabaseUserExistsError,
)


def _session(user_id="user-1", access_token="access", refresh_token="refresh"):
    return AuthSession(
        user_id=user_id,
        email="ana@college.edu",
        access_token=access_token,
        refresh_token=refresh_token,
    )


def _profile(role="student", name="Ana"):
    return ProfileRecord(
        id="user-1",
        email="ana@college.edu",
        name=name,
        mobile_number=None,
        department="CSE",
        role=role,
        subjects=None,
        created_at=None,
        updated_at=None,
    )


class SignupValidationTests(unittest.TestCase):
    def test_validation_messages(self):
        self.assertIn("email", validate_signup("", "secret1", "secret1", "Ana", "CSE", "Student"))
        self.assertIn("department", validate_signup("a@b.c", "secret1", "secret1", "Ana", "", "Student"))
        self.assertIn("valid role", validate_signup("a@b.c", "secret1", "secret1", "Ana", "CSE", "Admin"))
        self.assertIn("do not match", validate_signup("a@b.c", "secret1", "secret2", "Ana", "CSE", "Student"))
        self.assertIn("at least 6", validate_signup("a@b.c", "abc", "abc", "Ana", "CSE", "Faculty"))
        self.assertIsNone(validate_signup("a@b.c", "secret1", "secret1", "Ana", "CSE", "Faculty"))

    def test_subjects_field_only_for_faculty(self):
        self.assertEqual(signup_role_change("Faculty"), gr.update(visible=True))
        self.assertEqual(signup_role_change("Student"), gr.update(visible=False))

    def test_initial_state_is_unresolved_guest(self):
        state = initial_auth_state()
        self.assertFalse(state["resolved"])
        self.assertFalse(state["isAuth"])
        self.assertIsNone(state["profile"])


class LoginTests(unittest.TestCase):
    @patch("app.pages.auth.fetch_profile")
    @patch("app.pages.auth.sign_in_user")
    def test_login_populates_state(self, mock_sign_in, mock_fetch):
        mock_sign_in.return_value = _session()
        mock_fetch.return_value = _profile(role="faculty")

        message, state = doLogin("  Ana@College.edu ", "secret1", initial_auth_state())

        self.assertEqual(mock_sign_in.call_args.kwargs["email"], "ana@college.edu")
        self.assertTrue(state["resolved"])
        self.assertTrue(state["isAuth"])
        self.assertEqual(state["user_id"], "user-1")
        self.assertEqual(state["access_token"], "access")
        self.assertEqual(state["profile"]["role"], "faculty")
        self.assertTrue(message["value"].startswith("OK:"))

    @patch("app.pages.auth.sign_in_user")
    def test_rejected_credentials_keep_state(self, mock_sign_in):
        mock_sign_in.side_effect = SupabaseAuthError("Invalid login credentials")
        auth = _empty_auth()
        message, state = doLogin("ana@college.edu", "wrong", auth)
        self.assertIs(state, auth)
        self.assertEqual(message, gr.update(value="ERROR: Invalid email or password."))

    @patch("app.pages.auth.sign_in_user")
    def test_missing_configuration_is_reported(self, mock_sign_in):
        mock_sign_in.side_effect = SupabaseConfigurationError("missing")
        message, _state = doLogin("ana@college.edu", "secret1", _empty_auth())
        self.assertIn("Configure SUPABASE_URL", message["value"])

    @patch("app.pages.auth.sign_in_user")
    def test_empty_fields_skip_supabase(self, mock_sign_in):
        message, _state = doLogin("", "", _empty_auth())
        mock_sign_in.assert_not_called()
        self.assertTrue(message["value"].startswith("Warning:"))

    @patch("app.pages.auth.fetch_profile")
    @patch("app.pages.auth.sign_in_user")
    def test_unconfirmed_email_gets_its_own_notice(self, mock_sign_in, mock_fetch):
        mock_sign_in.side_effect = SupabaseEmailNotConfirmedError("Email not confirmed")
        auth = _empty_auth()
        message, state = doLogin("ana@college.edu", "secret1", auth)
        mock_fetch.assert_not_called()
        self.assertIs(state, auth)
        self.assertEqual(
            message["value"], "Warning: Confirm your email address, then sign in again."
        )

    @patch("app.pages.auth.fetch_profile")
    @patch("app.pages.auth.sign_in_user")
    def test_missing_profile_still_signs_in(self, mock_sign_in, mock_fetch):
        mock_sign_in.return_value = _session()
        mock_fetch.return_value = None
        message, state = doLogin("ana@college.edu", "secret1", _empty_auth())
        self.assertTrue(state["isAuth"])
        self.assertIsNone(state["profile"])
        self.assertIn("profile could not be found", message["value"])


class RegisterTests(unittest.TestCase):
    @patch("app.pages.auth.create_profile")
    @patch("app.pages.auth.sign_up_user")
    def test_register_creates_auth_user_and_profile(self, mock_sign_up, mock_create):
        mock_sign_up.return_value = _session()
        mock_create.return_value = _profile(role="faculty", name="Dr. Rao")

        message, state = doRegister(
            "Rao@College.edu", "secret1", "secret1", "Dr. Rao", "", "CSE", "Faculty", "Graphs",
            _empty_auth(),
        )

        self.assertEqual(
            mock_sign_up.call_args.kwargs["metadata"], {"name": "Dr. Rao", "role": "faculty"}
        )
        create_kwargs = mock_create.call_args.kwargs
        self.assertEqual(create_kwargs["user_id"], "user-1")
        self.assertEqual(create_kwargs["role"], "faculty")
        self.assertEqual(create_kwargs["subjects"], "Graphs")
        self.assertTrue(state["isAuth"])
        self.assertEqual(state["profile"]["name"], "Dr. Rao")
        self.assertTrue(message["value"].startswith("OK:"))

    @patch("app.pages.auth.create_profile")
    @patch("app.pages.auth.sign_up_user")
    def test_students_do_not_send_subjects(self, mock_sign_up, mock_create):
        mock_sign_up.return_value = _session()
        mock_create.return_value = _profile()
        doRegister("a@b.c", "secret1", "secret1", "Ana", "", "CSE", "Student", "Graphs", _empty_auth())
        self.assertIsNone(mock_create.call_args.kwargs["subjects"])

    @patch("app.pages.auth.create_profile")
    @patch("app.pages.auth.sign_up_user")
    def test_pending_confirmation_keeps_guest_state(self, mock_sign_up, mock_create):
        mock_sign_up.return_value = _session(access_token=None, refresh_token=None)
        mock_create.return_value = _profile()
        auth = _empty_auth()
        message, state = doRegister("a@b.c", "secret1", "secret1", "Ana", "", "CSE", "Student", "", auth)
        self.assertIs(state, auth)
        self.assertIn("Check your email", message["value"])

    @patch("app.pages.auth.create_profile")
    @patch("app.pages.auth.sign_up_user")
    def test_duplicate_email(self, mock_sign_up, mock_create):
        mock_sign_up.side_effect = SupabaseUserExistsError("User already registered.")
        message, _state = doRegister("a@b.c", "secret1", "secret1", "Ana", "", "CSE", "Student", "", _empty_auth())
        mock_create.assert_not_called()
        self.assertEqual(message["value"], "Warning: This email is already registered.")

    @patch("app.pages.auth.sign_up_user")
    def test_invalid_form_skips_supabase(self, mock_sign_up):
        message, _state = doRegister("a@b.c", "abc", "abd", "Ana", "", "CSE", "Student", "", _empty_auth())
        mock_sign_up.assert_not_called()
        self.assertEqual(message["value"], "Warning: Passwords do not match.")


class SessionTests(unittest.TestCase):
    @patch("app.pages.auth.fetch_profile")
    @patch("app.pages.auth.restore_user_session")
    @patch("app.pages.auth.sign_in_user")
    def test_login_then_reload_restores_session(self, mock_sign_in, mock_restore, mock_fetch):
        mock_sign_in.return_value = _session()
        mock_fetch.return_value = _profile(role="faculty")
        _message, signed_in = doLogin("ana@college.edu", "secret1", initial_auth_state())

        stored = session_tokens(signed_in)
        self.assertEqual(stored, {"access_token": "access", "refresh_token": "refresh"})

        # A reload starts from a fresh auth state; only the stored tokens survive.
        mock_restore.return_value = _session(access_token="access-2", refresh_token="refresh-2")
        restored = restore_session(stored)

        mock_restore.assert_called_once()
        self.assertEqual(mock_restore.call_args.kwargs["access_token"], "access")
        self.assertEqual(mock_restore.call_args.kwargs["refresh_token"], "refresh")
        self.assertTrue(restored["resolved"])
        self.assertTrue(restored["isAuth"])
        self.assertEqual(restored["user_id"], signed_in["user_id"])
        self.assertEqual(restored["profile"]["role"], "faculty")
        self.assertEqual(
            session_tokens(restored), {"access_token": "access-2", "refresh_token": "refresh-2"}
        )

    def test_guest_and_logged_out_states_store_no_tokens(self):
        empty = {"access_token": None, "refresh_token": None}
        self.assertEqual(session_tokens(None), empty)
        self.assertEqual(session_tokens(initial_auth_state()), empty)
        self.assertEqual(session_tokens(_doLogout(_empty_auth())), empty)

    @patch("app.pages.auth.sign_out_user")
    def test_logout_always_clears_state(self, mock_sign_out):
        mock_sign_out.side_effect = SupabaseOperationError("network down")
        auth = {
            "resolved": True,
            "isAuth": True,
            "user_id": "user-1",
            "access_token": "access",
            "refresh_token": "refresh",
            "profile": {"role": "student"},
        }
        self.assertEqual(_doLogout(auth), _empty_auth())
        mock_sign_out.assert_called_once()

    @patch("app.pages.auth.restore_user_session")
    def test_restore_without_tokens_resolves_to_guest(self, mock_restore):
        self.assertEqual(restore_session(initial_auth_state()), _empty_auth())
        mock_restore.assert_not_called()

    @patch("app.pages.auth.fetch_profile")
    @patch("app.pages.auth.restore_user_session")
    def test_restore_refreshes_tokens_and_profile(self, mock_restore, mock_fetch):
        mock_restore.return_value = _session(access_token="new-access", refresh_token="new-refresh")
        mock_fetch.return_value = _profile()
        state = restore_session({"access_token": "old", "refresh_token": "old-refresh"})
        self.assertTrue(state["isAuth"])
        self.assertEqual(state["access_token"], "new-access")
        self.assertEqual(state["profile"]["department"], "CSE")

    @patch("app.pages.auth.restore_user_session")
    def test_rejected_session_resolves_to_guest(self, mock_restore):
        mock_restore.side_effect = SupabaseAuthError("Session expired")
        state = restore_session({"access_token": "old", "refresh_token": "old-refresh"})
        self.assertEqual(state, _empty_auth())

    @patch("app.pages.auth.fetch_profile")
    def test_refresh_profile_keeps_state_on_error(self, mock_fetch):
        mock_fetch.side_effect = SupabaseOperationError("timeout")
        auth = {"isAuth": True, "user_id": "user-1", "profile": {"name": "Ana"}}
        state, error = refresh_profile(auth)
        self.assertIs(state, auth)
        self.assertEqual(error, "timeout")

        mock_fetch.side_effect = None
        mock_fetch.return_value = _profile(name="Ana Maria")
        state, error = refresh_profile(auth)
        self.assertIsNone(error)
        self.assertEqual(state["profile"]["name"], "Ana Maria")


if __name__ == "__main__":
    unittest.main()
