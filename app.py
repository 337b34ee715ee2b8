# app.py
from __future__ import annotations

import logging

import streamlit as st

from core.auth import session_user
from core.db import get_engine, init_db
from core.logs import setup_logging
from core.settings import load_settings

settings = load_settings()
setup_logging(settings.app.log_level)
log = logging.getLogger("app")

st.set_page_config(page_title=settings.app.title, page_icon="🎓", layout="wide")


@st.cache_resource(show_spinner=False)
def _bootstrap(url: str):
    engine = get_engine(url)
    init_db(engine, settings.bootstrap)
    log.info("database ready")
    return engine


try:
    engine = _bootstrap(settings.db.url)
except Exception as e:
    log.exception("database bootstrap failed")
    st.error("❌ Could not open the database.")
    st.exception(e)
    st.stop()

if session_user() is None:
    from screens import login as login_screen
    login_screen.render(engine, settings)
else:
    from screens.students import page as students_page
    students_page.render(engine, settings)
