# core/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class DBSettings:
    url: str = "sqlite:///students.db"


@dataclass(frozen=True)
class AppSettings:
    title: str = "School Management System"
    date_format: str = "%d/%m/%Y"
    log_level: str = "INFO"


@dataclass(frozen=True)
class BootstrapAdmin:
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: str = "Administrator"

    @property
    def enabled(self) -> bool:
        return bool(self.email and self.password)


@dataclass(frozen=True)
class Settings:
    db: DBSettings = field(default_factory=DBSettings)
    app: AppSettings = field(default_factory=AppSettings)
    bootstrap: BootstrapAdmin = field(default_factory=BootstrapAdmin)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_settings() -> Settings:
    """
    Build settings from the environment (a local .env is read first).
    Variables already present in the environment win over .env entries.
    """
    load_dotenv(override=False)
    return Settings(
        db=DBSettings(url=_env("STUDENTS_DB_URL", DBSettings.url)),
        app=AppSettings(
            title=_env("STUDENTS_APP_TITLE", AppSettings.title),
            date_format=_env("STUDENTS_DATE_FORMAT", AppSettings.date_format),
            log_level=(_env("STUDENTS_LOG_LEVEL", AppSettings.log_level) or "INFO").upper(),
        ),
        bootstrap=BootstrapAdmin(
            email=_env("STUDENTS_ADMIN_EMAIL"),
            password=_env("STUDENTS_ADMIN_PASSWORD"),
            full_name=_env("STUDENTS_ADMIN_NAME", BootstrapAdmin.full_name),
        ),
    )
