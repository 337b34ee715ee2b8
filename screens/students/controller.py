# screens/students/controller.py
from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from core.policy import can_edit_page
from core.ui import Notification
from screens.students.form import StudentForm
from screens.students.models import StudentRecord, filter_students

log = logging.getLogger(__name__)


class DashboardController:
    """
    Owns the dashboard state for one browser session.

    The collection is a disposable copy of the store: it is only ever
    replaced by a full fetch, never patched. Each fetch takes a ticket;
    a result whose ticket is no longer the newest is dropped, so a slow
    response cannot overwrite a fresher one.
    """

    def __init__(self, store):
        self.store = store
        self.records: List[StudentRecord] = []
        self.search_term = ""
        self.loading = True
        self.user_name = ""
        self.user_role: Optional[str] = None
        self.pending_delete: Optional[str] = None
        self.notifications: List[Notification] = []
        self.activated = False
        self.form = StudentForm(store, self.notify, on_success=self.fetch_students)

        self._tickets = itertools.count(1)
        self._latest_ticket = 0
        self._lock = threading.Lock()

    # ── derived state ──────────────────────────────────────────────────────
    @property
    def filtered(self) -> List[StudentRecord]:
        return filter_students(self.records, self.search_term)

    @property
    def is_admin(self) -> bool:
        return bool(self.user_role) and can_edit_page("Students", {self.user_role})

    def notify(self, notification: Notification) -> None:
        with self._lock:
            self.notifications.append(notification)

    def set_search_term(self, term: str) -> None:
        self.search_term = term or ""

    # ── loading ────────────────────────────────────────────────────────────
    def activate(self) -> None:
        """Resolve the user and fetch the collection side by side."""
        # session state is only visible from the script thread
        user = self._session_user()
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dashboard") as pool:
            user_job = pool.submit(self.load_user, user)
            fetch_job = pool.submit(self.fetch_students)
            user_job.result()
            fetch_job.result()
        self.activated = True

    def _session_user(self) -> Optional[dict]:
        try:
            return self.store.get_current_user()
        except Exception:
            log.exception("error reading session user")
            return None

    def load_user(self, user: Optional[dict] = None) -> None:
        """Fill display name and role for `user`; safe to call off the script thread."""
        try:
            if not user:
                return
            profile = self.store.get_user_profile(user["id"])
            if profile:
                self.user_name = profile["display_name"]
            role = self.store.get_user_role(user["id"])
            if role:
                self.user_role = role["role"]
        except Exception:
            # header stays blank; the student list still loads
            log.exception("error fetching user data")

    def begin_fetch(self) -> int:
        with self._lock:
            ticket = next(self._tickets)
            self._latest_ticket = ticket
            self.loading = True
        return ticket

    def finish_fetch(self, ticket: int, records: Optional[List[StudentRecord]] = None,
                     error: Optional[BaseException] = None) -> bool:
        """Apply a fetch outcome. Returns False when the ticket was superseded."""
        with self._lock:
            if ticket != self._latest_ticket:
                log.debug("dropping stale fetch %s (latest %s)", ticket, self._latest_ticket)
                return False
            try:
                if error is not None:
                    self.notifications.append(
                        Notification("Error loading students", str(error), "destructive")
                    )
                else:
                    self.records = list(records or [])
            finally:
                self.loading = False
        return True

    def fetch_students(self) -> None:
        ticket = self.begin_fetch()
        try:
            records = self.store.list_records()
        except Exception as e:
            log.warning("fetching students failed: %s", e)
            self.finish_fetch(ticket, error=e)
            return
        self.finish_fetch(ticket, records=records)

    # ── create / edit ──────────────────────────────────────────────────────
    def open_create(self) -> None:
        self.form.open(None)

    def open_edit(self, record: StudentRecord) -> None:
        self.form.open(record)

    # ── delete ─────────────────────────────────────────────────────────────
    def request_delete(self, record_id: str) -> None:
        self.pending_delete = record_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def confirm_delete(self) -> bool:
        record_id, self.pending_delete = self.pending_delete, None
        if record_id is None:
            return False
        try:
            self.store.delete_record(record_id)
        except Exception as e:
            log.warning("deleting student %s failed: %s", record_id, e)
            self.notify(Notification("Error deleting student", str(e), "destructive"))
            return False
        self.notify(Notification("Student deleted", "The student was removed successfully"))
        self.fetch_students()
        return True
