# screens/students/page.py
from __future__ import annotations

import logging
import traceback
from typing import Optional

import streamlit as st
from sqlalchemy.engine import Engine

from core.auth import logout
from core.policy import require_page
from core.settings import Settings
from core.ui import flush_notifications, render_header
from schemas.students_schema import STUDENT_STATUSES
from screens.students import table as student_table
from screens.students.controller import DashboardController
from screens.students.db import StudentStore
from screens.students.models import (
    EMAIL_MAX,
    ENROLLMENT_MAX,
    NAME_MAX,
    STATUS_LABELS,
    birth_date_bounds,
)

log = logging.getLogger(__name__)

PAGE_KEY = "Students"
CONTROLLER_KEY = "students__controller"


def _k(s: str) -> str:
    """Per-page key namespace to avoid collisions if rendered twice."""
    return f"students__{s}"


def get_controller(engine: Engine) -> DashboardController:
    ctl = st.session_state.get(CONTROLLER_KEY)
    if ctl is None:
        ctl = DashboardController(StudentStore(engine))
        st.session_state[CONTROLLER_KEY] = ctl
    return ctl


# ────────────────────────────────────────────────────────────────────────────────
# Dialogs
# ────────────────────────────────────────────────────────────────────────────────

@st.dialog("Student")
def _student_dialog(ctl: DashboardController) -> None:
    form = ctl.form
    sid = form.session
    st.subheader(form.title)
    min_birth, max_birth = birth_date_bounds(form.fields["birth_date"])

    with st.form(key=_k(f"form_{sid}")):
        name = st.text_input("Full name *", value=form.fields["name"], max_chars=NAME_MAX, key=_k(f"name_{sid}"))
        enrollment = st.text_input("Enrollment *", value=form.fields["enrollment"], max_chars=ENROLLMENT_MAX, key=_k(f"enrollment_{sid}"))
        birth_date = st.date_input(
            "Birth date *",
            value=form.fields["birth_date"],
            min_value=min_birth,
            max_value=max_birth,
            format="DD/MM/YYYY",
            key=_k(f"birth_{sid}"),
        )
        email = st.text_input("E-mail *", value=form.fields["email"], max_chars=EMAIL_MAX, key=_k(f"email_{sid}"))
        status = st.selectbox(
            "Status *",
            list(STUDENT_STATUSES),
            index=list(STUDENT_STATUSES).index(form.fields["status"]),
            format_func=lambda s: STATUS_LABELS.get(s, s),
            key=_k(f"status_{sid}"),
        )
        submitted = st.form_submit_button(form.submit_label, type="primary", disabled=form.submitting)

    if st.button("Cancel", key=_k(f"cancel_{sid}")):
        form.close()
        st.rerun()

    if submitted:
        ok = form.submit({
            "name": name,
            "enrollment": enrollment,
            "birth_date": birth_date,
            "email": email,
            "status": status,
        })
        if ok:
            st.rerun()
        for msg in form.error_messages():
            st.error(msg)
        flush_notifications(ctl.notifications)


@st.dialog("Delete student")
def _confirm_delete_dialog(ctl: DashboardController) -> None:
    target = next((r for r in ctl.records if r.id == ctl.pending_delete), None)
    label = f"**{target.name}** ({target.enrollment})" if target else "this student"
    st.write(f"Are you sure you want to delete {label}?")

    col_yes, col_no = st.columns(2)
    if col_yes.button("Delete", type="primary", key=_k("confirm_delete"), use_container_width=True):
        ctl.confirm_delete()
        st.rerun()
    if col_no.button("Cancel", key=_k("cancel_delete"), use_container_width=True):
        ctl.cancel_delete()
        st.rerun()


# ────────────────────────────────────────────────────────────────────────────────
# Main
# ────────────────────────────────────────────────────────────────────────────────

@require_page(PAGE_KEY)
def render(engine: Engine, settings: Optional[Settings] = None) -> None:
    settings = settings or Settings()
    ctl = get_controller(engine)

    if not ctl.activated:
        with st.spinner("Loading..."):
            ctl.activate()

    if render_header(settings.app.title, "Student management", ctl.user_name, ctl.user_role):
        log.info("logout %s", ctl.user_name or "-")
        logout()
        st.rerun()

    st.divider()

    col_search, col_add = st.columns([3, 1])
    with col_search:
        term = st.text_input(
            "Search",
            value=ctl.search_term,
            placeholder="Search by name or enrollment...",
            label_visibility="collapsed",
            key=_k("search"),
        )
        ctl.set_search_term(term)
    with col_add:
        if ctl.is_admin and st.button("➕ New Student", type="primary", key=_k("add"), use_container_width=True):
            ctl.open_create()
            _student_dialog(ctl)

    try:
        records = ctl.filtered
        view = student_table.build_table(records, ctl.loading, ctl.is_admin, settings.app.date_format)

        # dialogs open only on the run where their button was clicked
        edit_clicked, delete_clicked = [], []
        student_table.render(
            view,
            records,
            on_edit=edit_clicked.append,
            on_delete=delete_clicked.append,
            key_prefix=_k("table"),
        )
        if edit_clicked:
            ctl.open_edit(edit_clicked[0])
            _student_dialog(ctl)
        elif delete_clicked:
            ctl.request_delete(delete_clicked[0])
            _confirm_delete_dialog(ctl)
    except Exception:
        log.exception("student list failed")
        st.error("Student list failed.")
        st.code(traceback.format_exc())

    flush_notifications(ctl.notifications)
