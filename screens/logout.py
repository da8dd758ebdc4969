# screens/logout.py
from __future__ import annotations
import streamlit as st

from core.navigation import RETURN_TO_KEY, navigate_to_login
from core.session import AuthStore


def render(store: AuthStore):
    st.markdown(
        """
        <style>
            [data-testid="stSidebar"] {
                display: none;
            }
        </style>
        """,
        unsafe_allow_html=True,
    )

    st.title("🚪 Logout")

    identity = store.identity
    store.logout()
    st.session_state.pop(RETURN_TO_KEY, None)

    if identity is not None:
        st.success(f"Successfully logged out {identity.email}")
    else:
        st.info("You are already logged out")

    if st.button("Go to Login Page", type="primary"):
        navigate_to_login()
