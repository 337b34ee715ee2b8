# core/ui.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import streamlit as st


@dataclass(frozen=True)
class Notification:
    title: str
    description: str = ""
    variant: str = "default"   # 'default' | 'destructive'

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


def flush_notifications(queue: List[Notification]) -> None:
    """Show queued notifications as toasts and empty the queue."""
    while queue:
        n = queue.pop(0)
        body = f"**{n.title}**" + (f"  \n{n.description}" if n.description else "")
        st.toast(body, icon="⚠️" if n.is_error else "✅")


def render_header(title: str, subtitle: str, user_name: str = "", role: Optional[str] = None) -> bool:
    """Page header with the signed-in user and a logout button. Returns True when logout was clicked."""
    col_left, col_right = st.columns([3, 1])
    with col_left:
        st.title(f"🎓 {title}")
        st.caption(subtitle)
    with col_right:
        st.markdown(f"**{user_name or '—'}**")
        st.caption((role or "").capitalize())
        return st.button("Log out", key="header__logout", use_container_width=True)
