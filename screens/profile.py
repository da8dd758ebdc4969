# screens/profile.py
import streamlit as st

from core.navigation import current_identity
from core.policy import get_role_display_info
from core.roles import get_role


def render():
    st.title("👤 Profile")

    identity = current_identity()
    if identity is None:
        st.error("User not found in session. Please log in again.")
        return

    info = get_role_display_info(identity.role) or {"display_name": identity.role, "description": ""}

    st.markdown("### Account")
    st.json({
        "name": identity.full_name,
        "email": identity.email,
        "role": info["display_name"],
    })

    role = get_role(identity.role)
    if role is not None:
        st.markdown("### Permissions")
        st.table([{"resource": p.resource, "actions": ", ".join(sorted(p.actions))} for p in role.permissions])
