# schemas/_seed.py
from __future__ import annotations

import os
from sqlalchemy import text as sa_text
from core.roles import ROLE_IDS
from core.schema_registry import register
from schemas.users_schema import ensure_users_schema

# ──────────────────────────────────────────────────────────────────────────────
# Demo directory: one active account per university role, plus a student.
# ──────────────────────────────────────────────────────────────────────────────

SEED_DOMAIN = "university.edu"

def _seed_should_run() -> bool:
    return os.getenv("SEED_RUN", "1").lower() not in ("0", "false")

def default_users() -> dict:
    admin_email = os.getenv("SEED_ADMIN_EMAIL", f"admin@{SEED_DOMAIN}").lower()
    users = {admin_email: ("System", "Administrator", "admin")}
    for role in ROLE_IDS:
        if role == "admin":
            continue
        first = role.replace("_", " ").title()
        users[f"{role}@{SEED_DOMAIN}"] = (first, "Demo", role)
    users[f"student@{SEED_DOMAIN}"] = ("Student", "Demo", "student")
    return users

@register
def seed_directory(engine):
    """
    Seed the demo user directory (INSERT OR IGNORE, so existing rows and
    role changes made through the console survive restarts).
    Set SEED_RUN=0 to skip.
    """
    if not _seed_should_run():
        return
    ensure_users_schema(engine)
    with engine.begin() as conn:
        for email, (first, last, role) in default_users().items():
            conn.execute(
                sa_text("""
                    INSERT OR IGNORE INTO users(email, first_name, last_name, role, active)
                    VALUES(:e, :f, :l, :r, 1)
                """),
                {"e": email, "f": first, "l": last, "r": role},
            )
