# screens/unauthorized.py
from __future__ import annotations
import streamlit as st

from core.navigation import current_role, navigate
from core.policy import get_role_display_info


def render(default_route: str = "/dashboard"):
    st.title("⛔ Access denied")
    info = get_role_display_info(current_role())
    if info:
        st.error(f"Your role ({info['display_name']}) does not have access to that page.")
    else:
        st.error("Your account does not have access to that page.")
    if st.button("Back to Dashboard", type="primary"):
        navigate(default_route)
