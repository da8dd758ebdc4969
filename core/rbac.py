# core/rbac.py
"""User directory backing the session store, and role assignment."""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Union
from sqlalchemy import text as sa_text
from sqlalchemy.engine import Engine, Connection

from core.policy import DEFAULT_EVALUATOR, PolicyEvaluator
from core.roles import ROLE_IDS
from core.session import AuthenticationError, Identity

logger = logging.getLogger(__name__)

__all__ = [
    "STUDENT_ROLE",
    "DIRECTORY_ROLES",
    "RoleAssignmentError",
    "upsert_user",
    "find_identity",
    "list_users",
    "directory_authenticator",
    "session_restorer",
    "assign_role",
    "role_history",
    "dashboard_stats",
]


# Roles a directory account may hold: every policy role, plus students (portal-only, no console policy).
STUDENT_ROLE = "student"
DIRECTORY_ROLES = ROLE_IDS + (STUDENT_ROLE,)


class RoleAssignmentError(PermissionError):
    """The actor is not allowed to make this role change."""


def _row_to_identity(row) -> Identity:
    m = row._mapping
    return Identity(
        id=int(m["id"]),
        email=m["email"],
        first_name=m["first_name"] or "",
        last_name=m["last_name"] or "",
        role=m["role"],
    )


def _find(conn: Connection, email: str, active_only: bool = True):
    sql = "SELECT id, email, first_name, last_name, role, active FROM users WHERE LOWER(email)=LOWER(:e)"
    if active_only:
        sql += " AND active=1"
    return conn.execute(sa_text(sql), {"e": (email or "").strip()}).fetchone()


def upsert_user(engine: Engine, email: str, role: str, first_name: str = "", last_name: str = "",
                active: bool = True) -> int:
    email = email.strip().lower()
    with engine.begin() as conn:
        conn.execute(
            sa_text("""
                INSERT INTO users(email, first_name, last_name, role, active)
                VALUES(:e, :f, :l, :r, :a)
                ON CONFLICT(email) DO UPDATE SET
                    first_name=excluded.first_name,
                    last_name=excluded.last_name,
                    role=excluded.role,
                    active=excluded.active
            """),
            {"e": email, "f": first_name, "l": last_name, "r": role, "a": 1 if active else 0},
        )
        row = conn.execute(sa_text("SELECT id FROM users WHERE email=:e"), {"e": email}).fetchone()
        return int(row[0])


def find_identity(engine: Engine, email: Optional[str]) -> Optional[Identity]:
    if not email:
        return None
    with engine.begin() as conn:
        row = _find(conn, email)
    return _row_to_identity(row) if row else None


def list_users(engine: Engine, include_inactive: bool = False) -> List[Dict]:
    sql = "SELECT id, email, first_name, last_name, role, active FROM users"
    if not include_inactive:
        sql += " WHERE active=1"
    sql += " ORDER BY email"
    with engine.begin() as conn:
        rows = conn.execute(sa_text(sql)).fetchall()
    return [dict(r._mapping) for r in rows]


def directory_authenticator(engine: Engine):
    """
    Authenticator for core.session.AuthStore that resolves an active user by
    email. Credential checking belongs to the external identity provider;
    this directory only answers "who is this and what role do they hold".
    """
    def _authenticate(email: str, password: str) -> Identity:
        identity = find_identity(engine, email)
        if identity is None:
            raise AuthenticationError(f"No active account for {email!r}")
        return identity

    return _authenticate


def session_restorer(engine: Engine, email_source):
    """Restore a session from a remembered email (e.g. a cookie or query param)."""
    def _restore() -> Optional[Identity]:
        return find_identity(engine, email_source())

    return _restore


def assign_role(engine: Engine, actor: Union[Identity, str], email: str, new_role: str,
                evaluator: PolicyEvaluator = DEFAULT_EVALUATOR) -> Identity:
    """
    Change a user's role. The actor needs users.assign_roles and must
    strictly outrank both the user's current role and the new one.
    """
    actor_role = actor.role if isinstance(actor, Identity) else actor
    actor_email = actor.email if isinstance(actor, Identity) else f"role:{actor}"

    if not evaluator.has_permission(actor_role, "users", "assign_roles"):
        raise RoleAssignmentError(f"Role {actor_role!r} may not assign roles.")
    if new_role not in DIRECTORY_ROLES and evaluator.role(new_role) is None:
        raise RoleAssignmentError(f"Unknown role {new_role!r}.")
    if not evaluator.can_manage_role(actor_role, new_role):
        raise RoleAssignmentError(f"Role {actor_role!r} cannot grant {new_role!r}.")

    with engine.begin() as conn:
        row = _find(conn, email, active_only=False)
        if not row:
            raise LookupError(f"User not found: {email}")
        target = _row_to_identity(row)
        if not evaluator.can_manage_role(actor_role, target.role):
            raise RoleAssignmentError(f"Role {actor_role!r} cannot manage {target.role!r} accounts.")
        if target.role == new_role:
            return target
        conn.execute(sa_text("UPDATE users SET role=:r WHERE id=:id"), {"r": new_role, "id": target.id})
        conn.execute(
            sa_text("""
                INSERT INTO role_changes(target_email, old_role, new_role, actor_email)
                VALUES(:t, :o, :n, :a)
            """),
            {"t": target.email, "o": target.role, "n": new_role, "a": actor_email},
        )
    logger.info("Role of %s changed %s -> %s by %s", target.email, target.role, new_role, actor_email)
    return target.model_copy(update={"role": new_role})


def role_history(engine: Engine, email: Optional[str] = None) -> List[Dict]:
    sql = "SELECT target_email, old_role, new_role, actor_email, at FROM role_changes"
    params = {}
    if email:
        sql += " WHERE LOWER(target_email)=LOWER(:e)"
        params["e"] = email
    sql += " ORDER BY id DESC"
    with engine.begin() as conn:
        rows = conn.execute(sa_text(sql), params).fetchall()
    return [dict(r._mapping) for r in rows]


def dashboard_stats(engine: Engine) -> Dict:
    """Directory counts in the shape core.widgets expects."""
    with engine.begin() as conn:
        rows = conn.execute(sa_text(
            "SELECT role, COUNT(*) FROM users WHERE active=1 GROUP BY role"
        )).fetchall()
    by_role = {r[0]: int(r[1]) for r in rows}
    students = by_role.get("student", 0)
    total = sum(by_role.values())
    return {
        "users": {
            "total": total,
            "students": students,
            "staff": total - students,
            "by_role": by_role,
        },
    }
