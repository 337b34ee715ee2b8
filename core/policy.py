# core/policy.py
from __future__ import annotations
from typing import Any, Callable, Dict, Optional, Set
import functools
import streamlit as st

ADMIN_ROLE = "admin"

# Display-side access map. Mutations are re-checked by the store (EDIT_ROLES).
PAGE_ACCESS = {
    "Home":     {"view": {"public"}},
    "Login":    {"view": {"public"}},
    "Logout":   {"view": {"public"}},
    "Students": {"view": {ADMIN_ROLE, "user"}, "edit": {ADMIN_ROLE}},
}

EDIT_ROLES: Set[str] = set(PAGE_ACCESS["Students"]["edit"])


def current_user() -> Dict[str, Any]:
    return st.session_state.get("user") or {}

def user_roles(user: Optional[Dict[str, Any]] = None) -> Set[str]:
    user_data = current_user() if user is None else user
    if user_data:
        return set(user_data.get("roles") or [])
    return {"public"}

def can_view_page(page_name: str, roles: Set[str]) -> bool:
    rules = PAGE_ACCESS.get(page_name) or {}
    allowed = set(rules.get("view") or [])
    if "public" in allowed:
        return True
    return True if not allowed else bool(roles & allowed)

def can_edit_page(page_name: str, roles: Set[str]) -> bool:
    rules = PAGE_ACCESS.get(page_name) or {}
    allowed = set(rules.get("edit") or [])
    return bool(roles & allowed)

def require_page(page_name: str):
    def _wrap(fn: Callable):
        @functools.wraps(fn)
        def _inner(*args, **kwargs):
            roles = user_roles()
            if not can_view_page(page_name, roles):
                st.error("Access Denied. You don't have permission to view this page.")
                st.stop()
            return fn(*args, **kwargs)
        return _inner
    return _wrap

