# screens/users_roles.py
from __future__ import annotations

import pandas as pd
import streamlit as st

from core.navigation import can, current_identity, require_route
from core.policy import get_role_display_info, manageable_roles
from core.rbac import DIRECTORY_ROLES, RoleAssignmentError, assign_role, list_users, role_history


def _role_label(role_id: str) -> str:
    info = get_role_display_info(role_id)
    return info["display_name"] if info else role_id.replace("_", " ").title()


def _users_frame(engine, include_inactive: bool) -> pd.DataFrame:
    df = pd.DataFrame(list_users(engine, include_inactive=include_inactive),
                      columns=["id", "email", "first_name", "last_name", "role", "active"])
    if not df.empty:
        df["role"] = df["role"].map(_role_label)
        df["active"] = df["active"].astype(bool)
    return df


def _render_directory(engine):
    include_inactive = st.toggle("Show inactive accounts", value=False)
    df = _users_frame(engine, include_inactive)
    if df.empty:
        st.info("No users yet.")
        return
    st.dataframe(df, use_container_width=True, hide_index=True, column_config={
        "id": st.column_config.NumberColumn("ID"),
        "email": st.column_config.TextColumn("Email"),
        "first_name": st.column_config.TextColumn("First name"),
        "last_name": st.column_config.TextColumn("Last name"),
        "role": st.column_config.TextColumn("Role"),
        "active": st.column_config.CheckboxColumn("Active"),
    })


def _render_assignment(engine):
    actor = current_identity()
    if not can("users", "assign_roles"):
        st.info("Your role cannot assign roles.")
        return

    grantable = manageable_roles(actor.role, DIRECTORY_ROLES)
    if not grantable:
        st.info("There are no roles below yours to assign.")
        return

    users = [u for u in list_users(engine) if u["role"] in grantable]
    if not users:
        st.info("No accounts you can manage.")
        return

    with st.form("assign_role_form"):
        email = st.selectbox(
            "User", [u["email"] for u in users],
            format_func=lambda e: f"{e} ({_role_label(next(u['role'] for u in users if u['email'] == e))})",
        )
        new_role = st.selectbox("New role", grantable, format_func=_role_label)
        submitted = st.form_submit_button("💾 Assign role", type="primary")

    if submitted:
        try:
            updated = assign_role(engine, actor, email, new_role)
        except (RoleAssignmentError, LookupError) as e:
            st.error(str(e))
            return
        st.success(f"{updated.email} is now {_role_label(updated.role)}.")


def _render_history(engine):
    rows = role_history(engine)
    if not rows:
        st.info("No role changes recorded.")
        return
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


@require_route("/users")
def render(engine):
    st.title("👥 Users & Roles")
    tab_users, tab_assign, tab_audit = st.tabs(["👥 Directory", "⚙️ Role Assignment", "📝 Audit Log"])
    with tab_users:
        _render_directory(engine)
    with tab_assign:
        _render_assignment(engine)
    with tab_audit:
        _render_history(engine)
