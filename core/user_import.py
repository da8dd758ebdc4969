# core/user_import.py
"""
Bulk user import (CSV / Excel).

Rows are validated against the role policy before anything is written:
the role must exist and the importing user must outrank it. New accounts
are inserted. Existing accounts keep their active flag, and a role change
on one goes through core.rbac.assign_role so it is checked and audited.
Bad rows are reported back.
"""
from __future__ import annotations
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import pandas as pd
from sqlalchemy import text as sa_text
from sqlalchemy.engine import Engine

from core.policy import DEFAULT_EVALUATOR, PolicyEvaluator
from core.rbac import DIRECTORY_ROLES, RoleAssignmentError, assign_role, upsert_user
from core.session import Identity

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["email", "first_name", "last_name", "role"]
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Header spellings seen in the spreadsheet templates handed out to departments.
_HEADER_ALIASES = {
    "e-mail": "email",
    "email_address": "email",
    "firstname": "first_name",
    "first": "first_name",
    "lastname": "last_name",
    "last": "last_name",
    "surname": "last_name",
}


class ImportValidationError(ValueError):
    """The file itself is unusable (missing columns, unreadable format)."""


@dataclass
class RowError:
    row: int          # 1-based spreadsheet row, header is row 1
    email: str
    message: str


@dataclass
class ImportReport:
    created: List[str] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    errors: List[RowError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([e.__dict__ for e in self.errors], columns=["row", "email", "message"])


def template_frame() -> pd.DataFrame:
    return pd.DataFrame(columns=REQUIRED_COLUMNS)


def _normalize_header(name) -> str:
    key = str(name).strip().lower().replace(" ", "_")
    return _HEADER_ALIASES.get(key, key)


def read_user_frame(source: Union[str, Path, io.IOBase, bytes], filename: str = "") -> pd.DataFrame:
    """Read a CSV or Excel upload into a frame with normalized headers and string cells."""
    if isinstance(source, bytes):
        source = io.BytesIO(source)
    name = (filename or str(getattr(source, "name", source))).lower()
    try:
        if name.endswith((".xlsx", ".xls")):
            df = pd.read_excel(source, dtype=str)
        else:
            df = pd.read_csv(source, dtype=str)
    except pd.errors.EmptyDataError as e:
        raise ImportValidationError("The file is empty.") from e
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        raise ImportValidationError(f"Could not read {filename or 'upload'}: {e}") from e
    df = df.rename(columns=_normalize_header)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ImportValidationError(f"Missing required column(s): {', '.join(missing)}")
    return df[REQUIRED_COLUMNS].fillna("").apply(lambda col: col.str.strip())


def _can_import(actor_role: str, evaluator: PolicyEvaluator) -> bool:
    return (evaluator.has_permission(actor_role, "students", "bulk_upload")
            or evaluator.has_permission(actor_role, "users", "create"))


def import_users(engine: Engine, actor: Union[Identity, str], frame: pd.DataFrame,
                 evaluator: PolicyEvaluator = DEFAULT_EVALUATOR) -> ImportReport:
    actor_role = actor.role if isinstance(actor, Identity) else actor
    if not _can_import(actor_role, evaluator):
        raise RoleAssignmentError(f"Role {actor_role!r} may not bulk-import users.")

    report = ImportReport()
    seen = set()
    with engine.begin() as conn:
        existing = {
            email: (role, bool(active))
            for email, role, active in conn.execute(sa_text("SELECT LOWER(email), role, active FROM users"))
        }

    for idx, rec in enumerate(frame.to_dict(orient="records"), start=2):
        email = (rec.get("email") or "").lower()
        role = rec.get("role") or ""

        if not EMAIL_RE.match(email):
            report.errors.append(RowError(idx, email, "invalid or missing email"))
            continue
        if email in seen:
            report.errors.append(RowError(idx, email, "duplicate email in file"))
            continue
        seen.add(email)
        if role not in DIRECTORY_ROLES:
            report.errors.append(RowError(idx, email, f"unknown role {role!r}"))
            continue
        if not evaluator.can_manage_role(actor_role, role):
            report.errors.append(RowError(idx, email, f"not allowed to create {role!r} accounts"))
            continue
        if email not in existing:
            upsert_user(engine, email, role, rec.get("first_name", ""), rec.get("last_name", ""))
            report.created.append(email)
            continue

        current_role, active = existing[email]
        if not evaluator.can_manage_role(actor_role, current_role):
            report.errors.append(RowError(idx, email, f"not allowed to modify existing {current_role!r} account"))
            continue
        if role != current_role:
            try:
                assign_role(engine, actor, email, role, evaluator=evaluator)
            except RoleAssignmentError as e:
                report.errors.append(RowError(idx, email, str(e)))
                continue
        upsert_user(engine, email, role, rec.get("first_name", ""), rec.get("last_name", ""), active=active)
        report.updated.append(email)

    logger.info(
        "Bulk import by %s: %d created, %d updated, %d rejected",
        actor_role, len(report.created), len(report.updated), len(report.errors),
    )
    return report
