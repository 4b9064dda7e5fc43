"""Package with the segmented Supabase integrations.

Roles: used by the page layer; authorization rules are applied by the pages
before calling the specialised modules (auth, profiles, notes and storage).
"""

from . import auth, common, notes, profiles, storage

__all__ = ["auth", "common", "notes", "profiles", "storage"]
