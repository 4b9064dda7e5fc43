import unittest
from unittest.mock import patch

import gradio as gr

from app.pages.admin import (
    ACCESS_DENIED,
    USERS_TABLE_HEADERS,
    admin_delete_note,
    admin_delete_user,
    admin_filter_notes,
    admin_filter_users,
    admin_note_matches,
    admin_refresh,
    admin_stats_md,
    user_matches,
)
from services.supabase_client import NoteRecord, ProfileRecord, SupabaseOperationError


def _user(user_id, name, email, role, department):
    return ProfileRecord(
        id=user_id,
        email=email,
        name=name,
        mobile_number=None,
        department=department,
        role=role,
        subjects=None,
        created_at="2024-01-05T08:00:00+00:00",
        updated_at=None,
    )


def _note(note_id, title, subject, department, faculty="Dr. Rao", file_url=None):
    return NoteRecord(
        id=note_id,
        title=title,
        file_url=file_url if file_url is not None else f"fac-1/{note_id}.pdf",
        file_name=f"{note_id}.pdf",
        department=department,
        subject=subject,
        faculty_id="fac-1",
        created_at="2024-02-01T08:00:00+00:00",
        updated_at=None,
        faculty_name=faculty,
    )


USERS = [
    _user("adm-1", "Asha", "asha@college.edu", "admin", "Administration"),
    _user("fac-1", "Dr. Rao", "rao@college.edu", "faculty", "Computer Science"),
    _user("stu-1", "Bruno", "bruno@college.edu", "student", "Computer Science"),
    _user("stu-2", None, "nameless@college.edu", "student", "Mechanical"),
]

NOTES = [
    _note("n-1", "Graph Theory", "Discrete Maths", "Computer Science"),
    _note("n-2", "Thermodynamics", "Physics", "Mechanical", faculty=None),
]

ADMIN_AUTH = {
    "resolved": True,
    "isAuth": True,
    "user_id": "adm-1",
    "email": "asha@college.edu",
    "profile": {"id": "adm-1", "name": "Asha", "role": "admin"},
}

STUDENT_AUTH = {
    "resolved": True,
    "isAuth": True,
    "user_id": "stu-1",
    "email": "bruno@college.edu",
    "profile": {"id": "stu-1", "name": "Bruno", "role": "student"},
}


class AdminFilterTests(unittest.TestCase):
    def test_user_search_covers_name_email_and_department(self):
        self.assertTrue(user_matches(USERS[1], "rao", "", ""))
        self.assertTrue(user_matches(USERS[2], "BRUNO@", "", ""))
        self.assertTrue(user_matches(USERS[2], "computer", "", ""))
        self.assertTrue(user_matches(USERS[3], "nameless", "", ""))
        self.assertFalse(user_matches(USERS[0], "computer", "", ""))

    def test_user_role_is_exact_and_department_is_containment(self):
        students = [u.id for u in USERS if user_matches(u, "", "student", "")]
        self.assertEqual(students, ["stu-1", "stu-2"])
        cs_students = [u.id for u in USERS if user_matches(u, "", "student", "science")]
        self.assertEqual(cs_students, ["stu-1"])

    def test_note_search_covers_title_subject_and_faculty(self):
        self.assertTrue(admin_note_matches(NOTES[0], "graph", ""))
        self.assertTrue(admin_note_matches(NOTES[0], "discrete", ""))
        self.assertTrue(admin_note_matches(NOTES[0], "rao", ""))
        self.assertFalse(admin_note_matches(NOTES[1], "rao", ""))
        self.assertTrue(admin_note_matches(NOTES[1], "", "mech"))

    def test_filter_users_renders_rows(self):
        table, dropdown, message = admin_filter_users(USERS, "", "faculty", "")
        self.assertEqual(
            table["value"],
            [["Dr. Rao", "rao@college.edu", "Faculty", "Computer Science", "05/01/2024"]],
        )
        self.assertEqual(len(table["value"][0]), len(USERS_TABLE_HEADERS))
        self.assertEqual(dropdown["value"], "fac-1")
        self.assertEqual(message, "OK: 1 user(s) found.")

    def test_empty_messages_depend_on_filters(self):
        self.assertEqual(admin_filter_users([], "", "", "")[2], "Info: No users have been created yet.")
        self.assertEqual(
            admin_filter_users(USERS, "zzz", "", "")[2], "Info: No users match your current filters."
        )
        self.assertEqual(admin_filter_notes([], "", "")[2], "Info: No notes have been created yet.")
        self.assertEqual(
            admin_filter_notes(NOTES, "", "civil")[2], "Info: No notes match your current filters."
        )

    def test_stats_count_roles_and_notes(self):
        stats = admin_stats_md(USERS, NOTES)
        self.assertTrue(stats.endswith("| 4 | 2 | 1 | 2 |"))
        self.assertTrue(admin_stats_md(None, None).endswith("| 0 | 0 | 0 | 0 |"))


class AdminRefreshTests(unittest.TestCase):
    @patch("app.pages.admin.list_notes")
    @patch("app.pages.admin.list_profiles")
    def test_refresh_loads_everything_for_admins(self, mock_profiles, mock_notes):
        mock_profiles.return_value = list(USERS)
        mock_notes.return_value = list(NOTES)

        result = admin_refresh(ADMIN_AUTH, "", "", "")

        self.assertNotIn("department", mock_notes.call_args.kwargs)
        users, notes, stats = result[:3]
        self.assertEqual(users, USERS)
        self.assertEqual(notes, NOTES)
        self.assertIn("| 4 | 2 | 1 | 2 |", stats)
        self.assertEqual(result[5], "OK: 4 user(s) found.")
        self.assertEqual(result[8], "OK: 2 note(s) found.")
        self.assertEqual(result[-1], "")

    @patch("app.pages.admin.list_profiles")
    def test_refresh_denies_non_admins(self, mock_profiles):
        result = admin_refresh(STUDENT_AUTH, "", "", "")
        mock_profiles.assert_not_called()
        self.assertEqual(result[:2], ([], []))
        self.assertEqual(result[-1], ACCESS_DENIED)

    @patch("app.pages.admin.list_notes")
    @patch("app.pages.admin.list_profiles")
    def test_refresh_reports_errors(self, mock_profiles, mock_notes):
        mock_profiles.side_effect = SupabaseOperationError("timeout")
        result = admin_refresh(ADMIN_AUTH, "", "", "")
        mock_notes.assert_not_called()
        self.assertEqual(result[-1], "ERROR: Error loading dashboard data: timeout")


class AdminDeleteTests(unittest.TestCase):
    @patch("app.pages.admin.delete_profile")
    def test_delete_user_requires_confirmation(self, mock_delete):
        users, notice, _reset = admin_delete_user(ADMIN_AUTH, "stu-1", False, USERS)
        mock_delete.assert_not_called()
        self.assertEqual(users, USERS)
        self.assertIn("confirmation", notice)

    @patch("app.pages.admin.delete_profile")
    def test_delete_user_removes_row(self, mock_delete):
        users, notice, reset = admin_delete_user(ADMIN_AUTH, "stu-1", True, USERS)
        self.assertEqual(mock_delete.call_args.kwargs["user_id"], "stu-1")
        self.assertEqual([u.id for u in users], ["adm-1", "fac-1", "stu-2"])
        self.assertEqual(notice, "OK: User deleted successfully.")
        self.assertEqual(reset, gr.update(value=False))

    @patch("app.pages.admin.delete_profile")
    def test_admin_cannot_delete_self(self, mock_delete):
        users, notice, _reset = admin_delete_user(ADMIN_AUTH, "adm-1", True, USERS)
        mock_delete.assert_not_called()
        self.assertEqual(len(users), len(USERS))
        self.assertIn("your own account", notice)

    @patch("app.pages.admin.delete_profile")
    def test_delete_user_failure_keeps_list(self, mock_delete):
        mock_delete.side_effect = SupabaseOperationError("fk violation")
        users, notice, _reset = admin_delete_user(ADMIN_AUTH, "stu-1", True, USERS)
        self.assertEqual(users, USERS)
        self.assertEqual(notice, "ERROR: Error deleting user: fk violation")

    @patch("app.pages.admin.delete_profile")
    def test_non_admin_cannot_delete(self, mock_delete):
        _users, notice, _reset = admin_delete_user(STUDENT_AUTH, "stu-2", True, USERS)
        mock_delete.assert_not_called()
        self.assertEqual(notice, ACCESS_DENIED)

    @patch("app.pages.admin.delete_file_from_bucket")
    @patch("app.pages.admin.delete_note_record")
    def test_delete_note_removes_row_and_file(self, mock_delete_row, mock_delete_file):
        notes, notice, _reset = admin_delete_note(ADMIN_AUTH, "n-1", True, NOTES)
        self.assertEqual(mock_delete_row.call_args.kwargs["note_id"], "n-1")
        self.assertEqual(mock_delete_file.call_args.kwargs["storage_path"], "fac-1/n-1.pdf")
        self.assertEqual([n.id for n in notes], ["n-2"])
        self.assertEqual(notice, "OK: Note deleted successfully.")

    @patch("app.pages.admin.delete_file_from_bucket")
    @patch("app.pages.admin.delete_note_record")
    def test_file_removal_failure_still_deletes_note(self, mock_delete_row, mock_delete_file):
        mock_delete_file.side_effect = SupabaseOperationError("object missing")
        notes, notice, _reset = admin_delete_note(ADMIN_AUTH, "n-1", True, NOTES)
        self.assertEqual([n.id for n in notes], ["n-2"])
        self.assertIn("could not be removed", notice)

    @patch("app.pages.admin.delete_file_from_bucket")
    @patch("app.pages.admin.delete_note_record")
    def test_note_without_file_skips_storage(self, mock_delete_row, mock_delete_file):
        notes = [_note("n-5", "Orphan", "Misc", "Civil", file_url="")]
        remaining, _notice, _reset = admin_delete_note(ADMIN_AUTH, "n-5", True, notes)
        mock_delete_row.assert_called_once()
        mock_delete_file.assert_not_called()
        self.assertEqual(remaining, [])


if __name__ == "__main__":
    unittest.main()
