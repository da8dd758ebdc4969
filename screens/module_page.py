# screens/module_page.py
"""Landing page for console sections that have a menu entry but no dedicated screen."""
from __future__ import annotations
import streamlit as st

from core.navigation import current_role
from core.policy import route_matches_prefix
from core.roles import get_role


def render(title: str, route: str, icon: str = "📄"):
    st.title(f"{icon} {title}")
    st.caption(route)

    role = get_role(current_role())
    if role is None:
        st.info("This section is available from the student portal.")
        return

    # The first path segment usually names the resource ("/finance/fees" -> finance).
    resource = route.strip("/").split("/")[0].replace("-", "_")
    granted = [p for p in role.permissions if p.resource == resource]
    if granted:
        st.markdown("**What you can do here**")
        for p in granted:
            st.write(f"- {p.resource}: {', '.join(sorted(p.actions))}")
    prefix = next((p for p in role.allowed_route_prefixes if route_matches_prefix(route, p)), None)
    if prefix:
        st.caption(f"Reachable through {prefix}")
