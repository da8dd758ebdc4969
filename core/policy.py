# core/policy.py
"""
Authorization evaluator over the role policy table.

Every question here is a pure predicate/query: unknown role ids, missing
roles and unmatched paths all degrade to the deny answer (False, 0, [],
None). Nothing in this module raises for bad input, so callers can ask
the same question from the route guard and again from in-page rendering.

Paths are matched as given. Callers must pass canonical paths (leading
slash, no trailing slash); "/students/" does not match the "/students"
prefix.
"""
from __future__ import annotations
from typing import Dict, List, Mapping, Optional, Protocol

from core.roles import UNIVERSITY_ROLES, WILDCARD_ROUTE, Role

__all__ = [
    "ADMIN_ROLE",
    "RoleSource",
    "PolicyEvaluator",
    "DEFAULT_EVALUATOR",
    "has_permission",
    "can_access_route",
    "get_dashboard_widgets",
    "get_role_level",
    "can_manage_role",
    "get_role_display_info",
    "manageable_roles",
    "route_matches_prefix",
]

ADMIN_ROLE = "admin"


class RoleSource(Protocol):
    """Anything that can answer "what is the current policy for this role id"."""

    def get(self, role_id: str) -> Optional[Role]: ...


def route_matches_prefix(path: str, prefix: str) -> bool:
    """A prefix authorizes itself and everything nested beneath it, never a sibling like '/students-old'."""
    return path == prefix or path.startswith(prefix + "/")


class PolicyEvaluator:
    def __init__(self, roles: RoleSource | Mapping[str, Role]):
        self._roles = roles

    def role(self, role_id: Optional[str]) -> Optional[Role]:
        if not isinstance(role_id, str):
            return None
        return self._roles.get(role_id)

    def has_permission(self, role_id: Optional[str], resource: str, action: str) -> bool:
        # The admin bypass is independent of whatever the table says.
        if role_id == ADMIN_ROLE:
            return True
        role = self.role(role_id)
        if role is None:
            return False
        # Union over every entry: a resource may be listed more than once.
        return any(p.allows(resource, action) for p in role.permissions)

    def can_access_route(self, role_id: Optional[str], path: str) -> bool:
        role = self.role(role_id)
        if role is None:
            return False
        if role_id == ADMIN_ROLE or WILDCARD_ROUTE in role.allowed_route_prefixes:
            return True
        if not isinstance(path, str) or not path:
            return False
        return any(route_matches_prefix(path, prefix) for prefix in role.allowed_route_prefixes)

    def get_dashboard_widgets(self, role_id: Optional[str]) -> List[str]:
        role = self.role(role_id)
        return list(role.dashboard_widgets) if role else []

    def get_role_level(self, role_id: Optional[str]) -> int:
        role = self.role(role_id)
        return role.level if role else 0

    def can_manage_role(self, manager_role_id: Optional[str], target_role_id: Optional[str]) -> bool:
        # Strictly greater: equal levels (including a role and itself) never manage each other.
        return self.get_role_level(manager_role_id) > self.get_role_level(target_role_id)

    def get_role_display_info(self, role_id: Optional[str]) -> Optional[Dict[str, str]]:
        role = self.role(role_id)
        if role is None:
            return None
        return {"display_name": role.display_name, "description": role.description}

    def manageable_roles(self, manager_role_id: Optional[str], candidates) -> List[str]:
        """Subset of `candidates` (order kept) the manager outranks."""
        return [r for r in candidates if self.can_manage_role(manager_role_id, r)]


DEFAULT_EVALUATOR = PolicyEvaluator(UNIVERSITY_ROLES)


def has_permission(role_id: Optional[str], resource: str, action: str) -> bool:
    return DEFAULT_EVALUATOR.has_permission(role_id, resource, action)


def can_access_route(role_id: Optional[str], path: str) -> bool:
    return DEFAULT_EVALUATOR.can_access_route(role_id, path)


def get_dashboard_widgets(role_id: Optional[str]) -> List[str]:
    return DEFAULT_EVALUATOR.get_dashboard_widgets(role_id)


def get_role_level(role_id: Optional[str]) -> int:
    return DEFAULT_EVALUATOR.get_role_level(role_id)


def can_manage_role(manager_role_id: Optional[str], target_role_id: Optional[str]) -> bool:
    return DEFAULT_EVALUATOR.can_manage_role(manager_role_id, target_role_id)


def get_role_display_info(role_id: Optional[str]) -> Optional[Dict[str, str]]:
    return DEFAULT_EVALUATOR.get_role_display_info(role_id)


def manageable_roles(manager_role_id: Optional[str], candidates=UNIVERSITY_ROLES) -> List[str]:
    return DEFAULT_EVALUATOR.manageable_roles(manager_role_id, candidates)
