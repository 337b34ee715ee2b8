# screens/login.py
from __future__ import annotations

import logging

import streamlit as st
from sqlalchemy.engine import Engine

from core.auth import authenticate, login
from core.settings import Settings

log = logging.getLogger(__name__)

VIEW_KEY = "login__view"


def render_landing(settings: Settings) -> None:
    st.markdown("<div style='height: 12vh'></div>", unsafe_allow_html=True)
    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        st.markdown("<h1 style='text-align:center'>🎓</h1>", unsafe_allow_html=True)
        st.markdown(f"<h1 style='text-align:center'>{settings.app.title}</h1>", unsafe_allow_html=True)
        st.markdown(
            "<p style='text-align:center'>Manage students simply, efficiently and securely</p>",
            unsafe_allow_html=True,
        )
        if st.button("Access system", type="primary", use_container_width=True, key="landing__enter"):
            st.session_state[VIEW_KEY] = "login"
            st.rerun()


def render_login(engine: Engine, settings: Settings) -> None:
    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        st.title("🔐 Sign in")
        st.caption(settings.app.title)
        with st.form(key="login_form"):
            email = st.text_input("Email", key="login__email").strip().lower()
            password = st.text_input("Password", type="password", key="login__password")
            submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

        if submitted:
            if not email or not password:
                st.error("Email and password are required.")
                return
            try:
                user = authenticate(engine, email, password)
            except Exception as e:
                log.exception("login failed")
                st.error(f"Could not sign in: {e}")
                return
            if user is None:
                st.error("Invalid email or password.")
                return
            login(user)
            st.rerun()

        if st.button("← Back", key="login__back"):
            st.session_state[VIEW_KEY] = "landing"
            st.rerun()


def render(engine: Engine, settings: Settings) -> None:
    if st.session_state.get(VIEW_KEY) == "login":
        render_login(engine, settings)
    else:
        render_landing(settings)
