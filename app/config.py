"""Application wide configuration constants."""

import os

APP_NAME = os.getenv("NOTE_NEST_APP_NAME", "Note Nest")

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
SUPABASE_PROFILES_TABLE = os.getenv("SUPABASE_PROFILES_TABLE", "profiles")
SUPABASE_NOTES_TABLE = os.getenv("SUPABASE_NOTES_TABLE", "notes")
SUPABASE_NOTES_BUCKET = os.getenv("SUPABASE_NOTES_BUCKET", "notes")

# Browser-stored session tokens are encrypted with this secret. Without it a
# random one is generated per process and restarts sign everyone out.
SESSION_STORAGE_KEY = "note_nest_session"
SESSION_STORAGE_SECRET = os.getenv("NOTE_NEST_SESSION_SECRET", "")

ROLE_STUDENT = "student"
ROLE_FACULTY = "faculty"
ROLE_ADMIN = "admin"
ROLES = (ROLE_STUDENT, ROLE_FACULTY, ROLE_ADMIN)

ROLE_LABELS = {
    ROLE_STUDENT: "Student",
    ROLE_FACULTY: "Faculty",
    ROLE_ADMIN: "Admin",
}
ROLE_BY_LABEL = {label.lower(): role for role, label in ROLE_LABELS.items()}

# Administrators are provisioned on the platform, never through the form.
SIGNUP_ROLES = (ROLE_STUDENT, ROLE_FACULTY)

ALLOWED_NOTE_EXTENSIONS = (".pdf", ".doc", ".docx", ".ppt", ".pptx", ".txt")

# Supabase Auth rejects shorter passwords by default.
MIN_PASSWORD_LENGTH = 6

DEFAULT_ROUTE = "notes"
