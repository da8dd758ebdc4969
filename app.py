# app.py
from __future__ import annotations
import logging

import streamlit as st

from core.settings import configure_logging, load_settings
from core.db import get_engine, init_db
from core.nav_registry import NavEntry, build_navigation, build_student_navigation, find_entry
from core.navigation import (
    LOGOUT_PATH,
    apply_decision,
    current_route,
    get_auth_store,
    guard_portal_route,
    navigate,
    navigate_to_logout,
)
from core.policy import get_role_display_info
from core.session import STUDENT_PORTAL, get_portal
from screens import bulk_upload, dashboard, login, logout, module_page, profile, unauthorized, users_roles

logger = logging.getLogger(__name__)

# Routes with a dedicated screen; every other menu route gets the generic module page.
SCREENS = {
    "/dashboard": lambda engine: dashboard.render(engine),
    "/users": lambda engine: users_roles.render(engine),
    "/users/roles": lambda engine: users_roles.render(engine),
    "/students/bulk-upload": lambda engine: bulk_upload.render(engine),
    "/profile": lambda engine: profile.render(),
}


def _ensure_settings():
    if "settings" not in st.session_state:
        settings = load_settings()
        configure_logging(settings)
        st.session_state["settings"] = settings
    return st.session_state["settings"]


def _ensure_engine(settings):
    if "engine" not in st.session_state:
        st.session_state["engine"] = get_engine(settings.db.url)
    return st.session_state["engine"]


def _menu_for(portal, role):
    if portal is STUDENT_PORTAL:
        return build_student_navigation()
    return build_navigation(role)


def _nav_button(entry: NavEntry, active_route: str, container):
    clicked = container.button(
        f"{entry.icon} {entry.label}",
        key=f"nav:{entry.route}:{entry.label}",
        type="primary" if entry.route == active_route else "secondary",
        use_container_width=True,
    )
    if clicked:
        navigate(entry.route)


def _render_sidebar(menu, identity, active_route):
    info = get_role_display_info(identity.role) or {"display_name": identity.role}
    st.sidebar.caption(f"Signed in as **{identity.full_name}** · _{info['display_name']}_")

    for entry in menu:
        if entry.is_group:
            group_open = any(c.route == active_route for c in entry.children)
            with st.sidebar.expander(f"{entry.icon} {entry.label}", expanded=group_open):
                for child in entry.children:
                    _nav_button(child, active_route, st)
        else:
            _nav_button(entry, active_route, st.sidebar)

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Logout", key="logout_sidebar", use_container_width=True):
        navigate_to_logout()


def main():
    settings = _ensure_settings()
    engine = _ensure_engine(settings)

    # Run database initialization ONCE per session.
    if "db_initialized" not in st.session_state:
        try:
            init_db(engine)
        except Exception as e:
            logger.exception("Database initialization failed")
            st.error("Database schema initialization failed. See details below.")
            with st.expander("Diagnostics"):
                st.exception(e)
            st.stop()
        st.session_state["db_initialized"] = True

    portal = get_portal(settings.app.portal)
    st.set_page_config(page_title=portal.title, layout="wide", initial_sidebar_state="auto")

    store = get_auth_store(engine)
    route = current_route(settings.auth.default_route)

    decision = guard_portal_route(
        portal, store.state, route,
        fallback_path=settings.auth.unauthorized_path,
        login_path=settings.auth.login_path,
    )
    if not decision.allow:
        apply_decision(decision)
        return

    if route == settings.auth.login_path:
        login.render(store, settings, engine)
        return
    if route == LOGOUT_PATH:
        logout.render(store)
        return

    identity = store.identity
    if identity is None:
        unauthorized.render(settings.auth.default_route)
        return

    menu = _menu_for(portal, identity.role)
    _render_sidebar(menu, identity, route)

    if route == settings.auth.unauthorized_path:
        unauthorized.render(settings.auth.default_route)
        return

    screen = SCREENS.get(route)
    if screen is not None:
        screen(engine)
        return

    entry = find_entry(menu, route)
    if entry is None:
        module_page.render(route.strip("/").replace("-", " ").title() or "Page", route)
    else:
        module_page.render(entry.label, route, entry.icon)


if __name__ == "__main__":
    main()
