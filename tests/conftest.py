from __future__ import annotations

from pathlib import Path

import pytest

from core.db import get_engine, init_db
from core.permissions import permission
from core.policy import PolicyEvaluator
from core.rbac import find_identity
from core.roles import Role


@pytest.fixture
def engine(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Fresh sqlite database with every schema installed and the demo directory seeded."""
    monkeypatch.setenv("SEED_RUN", "1")
    monkeypatch.delenv("SEED_ADMIN_EMAIL", raising=False)
    eng = get_engine(f"sqlite:///{tmp_path / 'data' / 'test.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def identity_for(engine):
    """Seeded identity for a role id (accounts are seeded as <role>@university.edu)."""
    def _get(role: str):
        identity = find_identity(engine, f"{role}@university.edu")
        assert identity is not None, role
        return identity
    return _get


def make_role(role_id: str, level: int = 10, permissions=(), routes=(), widgets=()) -> Role:
    return Role(
        id=role_id,
        display_name=role_id.title(),
        description="",
        level=level,
        permissions=tuple(permissions),
        allowed_route_prefixes=tuple(routes),
        dashboard_widgets=tuple(widgets),
    )


@pytest.fixture
def custom_evaluator() -> PolicyEvaluator:
    """A small table exercising split permission entries, prefixes and the wildcard."""
    return PolicyEvaluator({
        "clerk": make_role(
            "clerk", 20,
            permissions=[permission("students", ["read"]), permission("students", ["update"])],
            routes=["/students"],
            widgets=["student_statistics", "not_a_widget"],
        ),
        "auditor": make_role("auditor", 30, routes=["*"]),
    })
