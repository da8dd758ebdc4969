# screens/login.py
from __future__ import annotations
import streamlit as st

from core.navigation import navigate_to_app
from core.rbac import list_users
from core.session import AuthenticationError, AuthStore
from core.settings import Settings


def _hide_sidebar():
    st.markdown(
        """
        <style>
            section[data-testid="stSidebar"] {
                display: none;
            }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render(store: AuthStore, settings: Settings, engine=None):
    _hide_sidebar()
    st.title(f"🔐 {settings.app.name}")

    if store.state.is_authenticated:
        st.info(f"Already signed in as {store.identity.email}.")
        if st.button("Continue", type="primary"):
            navigate_to_app(settings.auth.default_route)
        return

    default_email = ""
    if settings.auth.demo_login_enabled and engine is not None:
        # Demo directory: pick any seeded account instead of typing it.
        accounts = [u["email"] for u in list_users(engine)]
        if accounts:
            default_email = st.selectbox("Demo account", accounts, key="demo_account")
        st.caption("Demo mode: passwords are not checked.")

    with st.form("login_form"):
        email = st.text_input("Email", value=default_email)
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")

    if submitted:
        if not email.strip():
            st.error("Email is required.")
            return
        try:
            identity = store.login(email.strip(), password)
        except AuthenticationError as e:
            st.error(str(e))
            return
        st.success(f"Logged in as {identity.email}! Redirecting...")
        navigate_to_app(settings.auth.default_route)
