# screens/students/form.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.errors import FormValidationError, NotAuthenticatedError
from core.ui import Notification
from screens.students.models import StudentRecord, blank_fields, clean_fields

log = logging.getLogger(__name__)


class StudentForm:
    """
    State behind the create/edit dialog.

    `session` increases on every open so widget keys derived from it never
    carry values from a previous edit into the next one.
    """

    def __init__(self, store, notify: Callable[[Notification], None],
                 on_success: Optional[Callable[[], None]] = None):
        self.store = store
        self._notify = notify
        self.on_success = on_success
        self.record: Optional[StudentRecord] = None
        self.fields: Dict[str, Any] = blank_fields()
        self.errors: Dict[str, str] = {}
        self.is_open = False
        self.submitting = False
        self.session = 0

    @property
    def is_edit(self) -> bool:
        return self.record is not None

    @property
    def title(self) -> str:
        return "Edit Student" if self.is_edit else "New Student"

    @property
    def submit_label(self) -> str:
        if self.submitting:
            return "Saving..."
        return "Update" if self.is_edit else "Register"

    def open(self, record: Optional[StudentRecord] = None) -> None:
        self.record = record
        self.fields = record.form_fields() if record else blank_fields()
        self.errors = {}
        self.submitting = False
        self.session += 1
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def submit(self, fields: Optional[Mapping[str, Any]] = None) -> bool:
        """Validate and write. Returns True when the store accepted the record."""
        if self.submitting:
            return False
        if fields is not None:
            self.fields = {**self.fields, **dict(fields)}

        try:
            payload = clean_fields(self.fields)
        except FormValidationError as e:
            self.errors = e.errors
            log.debug("form rejected: %s", e)
            return False
        self.errors = {}

        self.submitting = True
        try:
            user = self.store.get_current_user()
            if not user:
                raise NotAuthenticatedError()

            if self.record is not None:
                self.store.update_record(self.record.id, payload)
                self._notify(Notification("Student updated", "The information was updated successfully"))
            else:
                self.store.insert_record(payload, created_by=user["id"])
                self._notify(Notification("Student registered", "The student was added successfully"))
        except Exception as e:
            log.warning("saving student failed: %s", e)
            self._notify(Notification("Error", str(e) or "Could not save the student", "destructive"))
            return False
        finally:
            self.submitting = False

        self.close()
        if self.on_success:
            self.on_success()
        return True

    def error_messages(self) -> List[str]:
        return list(self.errors.values())
