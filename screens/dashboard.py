# screens/dashboard.py
from __future__ import annotations
import streamlit as st

from core.navigation import current_identity
from core.policy import get_role_display_info
from core.rbac import dashboard_stats
from core.widgets import DEFAULT_WIDGETS

CARDS_PER_ROW = 3


def render(engine):
    identity = current_identity()
    info = get_role_display_info(identity.role) or {}

    st.title("🏠 Dashboard")
    st.caption(f"Welcome back, **{identity.full_name}** · _{info.get('display_name', identity.role)}_")
    if info.get("description"):
        st.write(info["description"])

    views = DEFAULT_WIDGETS.render_for_role(identity.role, dashboard_stats(engine))
    if not views:
        st.info("No dashboard widgets are configured for your role.")
        return

    for start in range(0, len(views), CARDS_PER_ROW):
        row = views[start:start + CARDS_PER_ROW]
        for col, view in zip(st.columns(CARDS_PER_ROW), row):
            with col:
                st.metric(f"{view.icon} {view.title}", view.value, delta=view.trend, help=view.subtitle or None)
