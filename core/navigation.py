# core/navigation.py
"""
Streamlit binding for the session store and the route guard.

One AuthStore lives in st.session_state per browser session. The current
route is a plain path string in st.session_state["route"]; redirects
rewrite it and rerun the script.
"""
from __future__ import annotations
import functools
import logging
from typing import Callable, Mapping, Optional

import streamlit as st

from core.policy import DEFAULT_EVALUATOR, PolicyEvaluator
from core.rbac import directory_authenticator, session_restorer
from core.route_guard import (
    LOGIN_PATH,
    ROUTE_RULES,
    UNAUTHORIZED_PATH,
    GuardDecision,
    RouteRule,
    guard_navigation,
    permission_gate,
    role_gate,
)
from core.session import AuthState, AuthStore, Identity, Portal, STUDENT_PORTAL

logger = logging.getLogger(__name__)

STORE_KEY = "auth_store"
ROUTE_KEY = "route"
RETURN_TO_KEY = "return_to"
USER_KEY = "user"
DEFAULT_ROUTE = "/dashboard"
LOGOUT_PATH = "/logout"

# Shell pages that are never guarded.
PUBLIC_ROUTES = frozenset({LOGIN_PATH, LOGOUT_PATH, UNAUTHORIZED_PATH})


def _external_email() -> Optional[str]:
    """Email of a user already signed in through Streamlit's OIDC login, if configured."""
    user = getattr(st, "user", None)
    if user is None or not user.get("is_logged_in"):
        return None
    return user.get("email")


def _mirror_user(state: AuthState) -> None:
    # Screens read the signed-in user from session_state["user"].
    if state.identity is not None:
        st.session_state[USER_KEY] = state.identity.model_dump()
    else:
        st.session_state.pop(USER_KEY, None)


def get_auth_store(engine=None) -> AuthStore:
    """The AuthStore for this browser session, created and initialized on first use."""
    store = st.session_state.get(STORE_KEY)
    if store is None:
        engine = engine if engine is not None else st.session_state.get("engine")
        if engine is None:
            raise RuntimeError("No database engine in session; call get_auth_store(engine) first.")
        store = AuthStore(directory_authenticator(engine), restore=session_restorer(engine, _external_email))
        store.subscribe(_mirror_user)
        st.session_state[STORE_KEY] = store
        store.initialize()
    return store


def current_identity() -> Optional[Identity]:
    store = st.session_state.get(STORE_KEY)
    return store.identity if store is not None else None


def current_role() -> Optional[str]:
    identity = current_identity()
    return identity.role if identity is not None else None


def current_route(default: str = DEFAULT_ROUTE) -> str:
    return st.session_state.get(ROUTE_KEY) or default


# ── redirects ────────────────────────────────────────────────────────────────

def navigate(route: str) -> None:
    st.session_state[ROUTE_KEY] = route
    st.rerun()


def apply_decision(decision: GuardDecision) -> None:
    """Follow a denied GuardDecision: remember where the user was going, then redirect."""
    if decision.allow:
        return
    if decision.return_to:
        st.session_state[RETURN_TO_KEY] = decision.return_to
    navigate(decision.redirect_to)


def navigate_to_login(return_to: Optional[str] = None, login_path: str = LOGIN_PATH) -> None:
    if return_to:
        st.session_state[RETURN_TO_KEY] = return_to
    navigate(login_path)


def navigate_to_logout() -> None:
    navigate(LOGOUT_PATH)


def navigate_to_app(default_route: str = DEFAULT_ROUTE) -> None:
    """After sign-in: go back to the page that bounced to login, else the default route."""
    target = st.session_state.pop(RETURN_TO_KEY, None)
    if not target or target in PUBLIC_ROUTES:
        target = default_route
    navigate(target)


# ── guards ───────────────────────────────────────────────────────────────────

def guard_portal_route(
    portal: Portal,
    state: AuthState,
    path: str,
    rules: Mapping[str, RouteRule] = ROUTE_RULES,
    fallback_path: str = UNAUTHORIZED_PATH,
    login_path: str = LOGIN_PATH,
    evaluator: PolicyEvaluator = DEFAULT_EVALUATOR,
) -> GuardDecision:
    """
    Route guard for a whole portal. Signed-in users outside the portal's
    roles are sent to the fallback. The student portal has no route table
    of its own, so admission is the only check there.
    """
    if path in PUBLIC_ROUTES or path in (login_path, fallback_path):
        return GuardDecision.allowed()
    if state is None or not state.is_authenticated:
        return GuardDecision.redirect(login_path, return_to=path)
    if not portal.admits(state):
        return GuardDecision.redirect(fallback_path)
    if portal is STUDENT_PORTAL:
        return GuardDecision.allowed()
    return guard_navigation(
        state, path, rules=rules, fallback_path=fallback_path,
        login_path=login_path, evaluator=evaluator,
    )


def require_route(
    path: str,
    rules: Mapping[str, RouteRule] = ROUTE_RULES,
    evaluator: PolicyEvaluator = DEFAULT_EVALUATOR,
) -> Callable:
    """
    Decorator for screen renderers. The wrapped function runs only when
    the guard allows `path`; otherwise the session is redirected and the
    wrapper returns None.
    """
    def decorator(render_fn: Callable) -> Callable:
        @functools.wraps(render_fn)
        def wrapper(*args, **kwargs):
            store = st.session_state.get(STORE_KEY)
            state = store.state if store is not None else None
            decision = guard_navigation(state, path, rules=rules, evaluator=evaluator)
            if not decision.allow:
                logger.debug("require_route(%s) redirecting to %s", path, decision.redirect_to)
                apply_decision(decision)
                return None
            return render_fn(*args, **kwargs)
        return wrapper
    return decorator


def can(resource: str, action: str, evaluator: PolicyEvaluator = DEFAULT_EVALUATOR) -> bool:
    """In-page permission check for the signed-in user."""
    return permission_gate(current_role(), resource, action, evaluator)


def has_role(*roles: str) -> bool:
    return role_gate(current_role(), roles)
