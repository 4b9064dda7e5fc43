"""Route guard and page visibility switching."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import gradio as gr

from app.config import DEFAULT_ROUTE
from app.utils import _is_authenticated, _user_role

# Order matters: navigate() returns one visibility update per page, in this order.
PAGES: Tuple[str, ...] = (
    "loading",
    "home",
    "about",
    "login",
    "signup",
    "notes",
    "profile",
    "admin",
)

# Page -> required role (None means any signed-in user).
PROTECTED_PAGES: Dict[str, Optional[str]] = {
    "notes": None,
    "profile": None,
    "admin": "admin",
}

GUEST_ONLY_PAGES = ("login", "signup")


def resolve_route(page: Optional[str], auth: Optional[Dict[str, Any]]) -> str:
    """Return the page actually shown for a requested page."""

    target = (page or "home").strip().lower()
    if target not in PAGES or target == "loading":
        target = "home"

    if not (auth or {}).get("resolved"):
        return "loading"

    signed_in = _is_authenticated(auth)
    if target in PROTECTED_PAGES:
        if not signed_in:
            return "login"
        required = PROTECTED_PAGES[target]
        if required and _user_role(auth) != required:
            return DEFAULT_ROUTE
        return target

    if target in GUEST_ONLY_PAGES and signed_in:
        return DEFAULT_ROUTE
    return target


def page_visibility(route: str):
    return tuple(gr.update(visible=(name == route)) for name in PAGES)


def navigate(page: Optional[str], auth: Optional[Dict[str, Any]]):
    """Return (current route, *page visibility updates) for a navigation request."""

    route = resolve_route(page, auth)
    if route != (page or "").strip().lower():
        print(f"[NAV] navigate: requested='{page}' -> '{route}'")
    return (route, *page_visibility(route))


__all__ = [
    "PAGES",
    "PROTECTED_PAGES",
    "resolve_route",
    "page_visibility",
    "navigate",
]
