# core/route_guard.py
"""
Per-navigation gate: render the protected page or redirect.

Checks run in a fixed order and the first failure decides the redirect:

1. not authenticated          -> login (remembering the requested path);
   authenticated without a role -> fallback
2. role not in allowed_roles  -> fallback
3. route prefix not allowed   -> fallback
4. required permission missing-> fallback
5. otherwise                  -> allow

A rule with no allowed_roles / required_permission simply skips that step.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, FrozenSet

from core.policy import DEFAULT_EVALUATOR, PolicyEvaluator, route_matches_prefix

logger = logging.getLogger(__name__)

__all__ = [
    "LOGIN_PATH",
    "UNAUTHORIZED_PATH",
    "RequiredPermission",
    "GuardDecision",
    "RouteRule",
    "ROUTE_RULES",
    "guard_route",
    "rule_for",
    "guard_navigation",
    "permission_gate",
    "role_gate",
]

LOGIN_PATH = "/login"
UNAUTHORIZED_PATH = "/unauthorized"


@dataclass(frozen=True)
class RequiredPermission:
    resource: str
    action: str


@dataclass(frozen=True)
class GuardDecision:
    allow: bool
    redirect_to: Optional[str] = None
    # Set only on the login redirect so the shell can send the user back after signing in.
    return_to: Optional[str] = None

    @classmethod
    def allowed(cls) -> "GuardDecision":
        return cls(allow=True)

    @classmethod
    def redirect(cls, to: str, return_to: Optional[str] = None) -> "GuardDecision":
        return cls(allow=False, redirect_to=to, return_to=return_to)


def guard_route(
    current_role: Optional[str],
    is_authenticated: bool,
    path: str,
    required_permission: Optional[RequiredPermission] = None,
    allowed_roles: Optional[Iterable[str]] = None,
    fallback_path: str = UNAUTHORIZED_PATH,
    login_path: str = LOGIN_PATH,
    evaluator: PolicyEvaluator = DEFAULT_EVALUATOR,
) -> GuardDecision:
    if not is_authenticated:
        return GuardDecision.redirect(login_path, return_to=path)

    if not current_role:
        logger.debug("Route %s denied: authenticated session has no role", path)
        return GuardDecision.redirect(fallback_path)

    if allowed_roles is not None and current_role not in set(allowed_roles):
        logger.debug("Route %s denied for role %s: not in allowed roles", path, current_role)
        return GuardDecision.redirect(fallback_path)

    if not evaluator.can_access_route(current_role, path):
        logger.debug("Route %s denied for role %s: no matching route prefix", path, current_role)
        return GuardDecision.redirect(fallback_path)

    if required_permission is not None and not evaluator.has_permission(
        current_role, required_permission.resource, required_permission.action
    ):
        logger.debug(
            "Route %s denied for role %s: missing %s.%s",
            path, current_role, required_permission.resource, required_permission.action,
        )
        return GuardDecision.redirect(fallback_path)

    return GuardDecision.allowed()


# ============================================================================
# ROUTE RULES (which routes demand extra checks beyond the prefix table)
# ============================================================================

@dataclass(frozen=True)
class RouteRule:
    required_permission: Optional[RequiredPermission] = None
    allowed_roles: Optional[FrozenSet[str]] = None


_OPEN = RouteRule()

ROUTE_RULES: Mapping[str, RouteRule] = MappingProxyType({
    "/users": RouteRule(RequiredPermission("users", "read")),
    "/students": RouteRule(RequiredPermission("students", "read")),
    "/students/bulk-upload": RouteRule(
        RequiredPermission("students", "bulk_upload"),
        allowed_roles=frozenset({"admin", "registrar"}),
    ),
    "/courses": RouteRule(RequiredPermission("courses", "read")),
    "/course-allocation": RouteRule(RequiredPermission("courses", "assign_lecturer")),
    "/results-upload": RouteRule(RequiredPermission("results", "upload")),
    "/accounts": RouteRule(RequiredPermission("finance", "view_payments")),
    "/finance": RouteRule(RequiredPermission("finance", "view_payments")),
})


def rule_for(path: str, rules: Mapping[str, RouteRule] = ROUTE_RULES) -> RouteRule:
    """Most specific rule whose prefix covers `path`; an empty rule when none does."""
    best_prefix = None
    for prefix in rules:
        if route_matches_prefix(path, prefix) and (best_prefix is None or len(prefix) > len(best_prefix)):
            best_prefix = prefix
    return rules[best_prefix] if best_prefix is not None else _OPEN


def guard_navigation(
    state,
    path: str,
    rules: Mapping[str, RouteRule] = ROUTE_RULES,
    fallback_path: str = UNAUTHORIZED_PATH,
    login_path: str = LOGIN_PATH,
    evaluator: PolicyEvaluator = DEFAULT_EVALUATOR,
) -> GuardDecision:
    """Guard `path` for a session state (see core.session.AuthState) using the route rule table."""
    identity = getattr(state, "identity", None)
    rule = rule_for(path, rules)
    return guard_route(
        current_role=identity.role if identity is not None else None,
        is_authenticated=bool(getattr(state, "is_authenticated", False)),
        path=path,
        required_permission=rule.required_permission,
        allowed_roles=rule.allowed_roles,
        fallback_path=fallback_path,
        login_path=login_path,
        evaluator=evaluator,
    )


# ============================================================================
# IN-PAGE GATES
# ============================================================================

def permission_gate(
    role: Optional[str], resource: str, action: str,
    evaluator: PolicyEvaluator = DEFAULT_EVALUATOR,
) -> bool:
    return bool(role) and evaluator.has_permission(role, resource, action)


def role_gate(role: Optional[str], allowed_roles: Iterable[str]) -> bool:
    return bool(role) and role in set(allowed_roles)
