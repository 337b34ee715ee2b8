# core/errors.py
from __future__ import annotations

from typing import Dict


class StoreError(Exception):
    """A record-store call failed. The message is safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAuthenticatedError(StoreError):
    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class FormValidationError(ValueError):
    """Raised with a field -> message mapping when form input is rejected."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))
