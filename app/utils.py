"""Utility helpers shared across UI pages."""

import re
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional


def _now_ms() -> int:
    """Return current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


def _normalize_text(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _contains(haystack: Optional[str], needle: Optional[str]) -> bool:
    """Case-insensitive containment; an empty needle always matches."""
    query = _normalize_text(needle)
    if not query:
        return True
    return query in (haystack or "").lower()


def _empty_auth() -> Dict[str, Any]:
    return {
        "resolved": True,
        "isAuth": False,
        "user_id": None,
        "email": None,
        "access_token": None,
        "refresh_token": None,
        "profile": None,
    }


def _auth_profile(auth: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    profile = (auth or {}).get("profile")
    return profile if isinstance(profile, dict) else {}


def _user_role(auth: Optional[Dict[str, Any]]) -> str:
    """Return normalized role string from the auth state."""
    return str(_auth_profile(auth).get("role") or "").strip().lower()


def _is_authenticated(auth: Optional[Dict[str, Any]]) -> bool:
    return bool(auth and auth.get("isAuth") is True and auth.get("user_id"))


def _is_admin(auth: Optional[Dict[str, Any]]) -> bool:
    return _user_role(auth) == "admin"


def _is_faculty(auth: Optional[Dict[str, Any]]) -> bool:
    return _user_role(auth) == "faculty"


def _auth_user_id(auth: Optional[Dict[str, Any]]) -> Optional[str]:
    return (auth or {}).get("user_id")


def _display_name(auth: Optional[Dict[str, Any]]) -> str:
    profile = _auth_profile(auth)
    return (profile.get("name") or "").strip() or (auth or {}).get("email") or "Profile"


# Postgres trims trailing zeros from fractional seconds; fromisoformat wants 3 or 6 digits before 3.11.
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def _parse_iso(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_PATTERN.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def _format_date(value: Any) -> str:
    if value in (None, ""):
        return "—"
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y")
    text = str(value).strip()
    try:
        return _parse_iso(text).strftime("%d/%m/%Y")
    except ValueError:
        return text


def _unique_in_order(values: Iterable[Optional[str]]) -> List[str]:
    seen = set()
    out = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        out.append(value)
    return out
