# screens/students/models.py
from __future__ import annotations

import datetime
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.errors import FormValidationError
from schemas.students_schema import STUDENT_STATUSES

NAME_MAX = 100
ENROLLMENT_MAX = 50
EMAIL_MAX = 255
BIRTH_DATE_MIN = datetime.date(1900, 1, 1)

STATUS_LABELS = {"active": "Active", "inactive": "Inactive"}

# Same shape check a browser applies to <input type="email">
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

FORM_FIELDS = ("name", "enrollment", "birth_date", "email", "status")


def _as_date(value: Any) -> Optional[datetime.date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value)[:10])


def _as_datetime(value: Any) -> Optional[datetime.datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value
    return datetime.datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class StudentRecord:
    id: str
    name: str
    enrollment: str
    birth_date: datetime.date
    email: str
    status: str
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    created_by: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "StudentRecord":
        return cls(
            id=str(row["id"]),
            name=row["name"],
            enrollment=row["enrollment"],
            birth_date=_as_date(row["birth_date"]),
            email=row["email"],
            status=row["status"],
            created_at=_as_datetime(row.get("created_at")),
            updated_at=_as_datetime(row.get("updated_at")),
            created_by=row.get("created_by"),
        )

    def form_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "enrollment": self.enrollment,
            "birth_date": self.birth_date,
            "email": self.email,
            "status": self.status,
        }


def blank_fields() -> Dict[str, Any]:
    return {
        "name": "",
        "enrollment": "",
        "birth_date": None,
        "email": "",
        "status": "active",
    }


def birth_date_bounds(value: Optional[datetime.date] = None) -> Tuple[datetime.date, datetime.date]:
    """Date picker range; widened to include a stored value that sits outside it."""
    low, high = BIRTH_DATE_MIN, datetime.date.today()
    if value is not None:
        low, high = min(low, value), max(high, value)
    return low, high


def clean_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate form input and return the normalized write payload.
    Raises FormValidationError listing every rejected field.
    """
    errors: Dict[str, str] = {}
    out: Dict[str, Any] = {}

    for key, label, limit in (
        ("name", "Full name", NAME_MAX),
        ("enrollment", "Enrollment", ENROLLMENT_MAX),
        ("email", "E-mail", EMAIL_MAX),
    ):
        value = str(fields.get(key) or "").strip()
        if not value:
            errors[key] = f"{label} is required."
        elif len(value) > limit:
            errors[key] = f"{label} must be at most {limit} characters."
        out[key] = value

    if out["email"] and "email" not in errors and not EMAIL_RE.match(out["email"]):
        errors["email"] = "Enter a valid e-mail address."

    try:
        birth = _as_date(fields.get("birth_date"))
    except ValueError:
        birth = None
        errors["birth_date"] = "Birth date must be a valid date (YYYY-MM-DD)."
    if birth is None and "birth_date" not in errors:
        errors["birth_date"] = "Birth date is required."
    elif birth is not None and not (BIRTH_DATE_MIN <= birth <= datetime.date.today()):
        errors["birth_date"] = f"Birth date must be between {BIRTH_DATE_MIN.isoformat()} and today."
    out["birth_date"] = birth

    status = fields.get("status") or ""
    if status not in STUDENT_STATUSES:
        errors["status"] = f"Status must be one of: {', '.join(STUDENT_STATUSES)}."
    out["status"] = status

    if errors:
        raise FormValidationError(errors)
    return out


def filter_students(records: Iterable[StudentRecord], term: str) -> List[StudentRecord]:
    """Case-insensitive substring match on name or enrollment; empty term keeps everything."""
    needle = (term or "").lower()
    return [
        r for r in records
        if needle in r.name.lower() or needle in r.enrollment.lower()
    ]
