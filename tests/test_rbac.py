from __future__ import annotations

import pytest
from sqlalchemy import text as sa_text

from core.rbac import (
    DIRECTORY_ROLES,
    RoleAssignmentError,
    assign_role,
    dashboard_stats,
    directory_authenticator,
    find_identity,
    list_users,
    role_history,
    session_restorer,
    upsert_user,
)
from core.roles import ROLE_IDS
from core.session import AuthenticationError, AuthStore, Authenticated
from schemas._seed import default_users


def test_seed_creates_one_account_per_role(engine) -> None:
    roles = sorted(u["role"] for u in list_users(engine))
    assert roles == sorted(DIRECTORY_ROLES)
    assert len(default_users()) == len(ROLE_IDS) + 1


def test_seed_respects_admin_email(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEED_ADMIN_EMAIL", "Root@University.edu")
    assert default_users()["root@university.edu"][2] == "admin"


def test_find_identity_is_case_insensitive_and_skips_inactive(engine) -> None:
    assert find_identity(engine, "  HOD@University.EDU ").role == "hod"
    upsert_user(engine, "gone@university.edu", "lecturer", active=False)
    assert find_identity(engine, "gone@university.edu") is None
    assert find_identity(engine, None) is None
    assert "gone@university.edu" in {u["email"] for u in list_users(engine, include_inactive=True)}


def test_upsert_updates_existing_row(engine) -> None:
    first = upsert_user(engine, "New.Person@university.edu", "lecturer", "New", "Person")
    second = upsert_user(engine, "new.person@university.edu", "hod", "New", "Person")
    assert first == second
    assert find_identity(engine, "new.person@university.edu").role == "hod"


def test_directory_authenticator_drives_store(engine) -> None:
    store = AuthStore(directory_authenticator(engine))
    identity = store.login("registrar@university.edu", "ignored")
    assert store.state == Authenticated(identity)
    with pytest.raises(AuthenticationError):
        store.login("nobody@university.edu", "x")


def test_session_restorer(engine) -> None:
    store = AuthStore(directory_authenticator(engine), restore=session_restorer(engine, lambda: "lecturer@university.edu"))
    assert store.initialize().identity.role == "lecturer"
    empty = AuthStore(directory_authenticator(engine), restore=session_restorer(engine, lambda: None))
    assert not empty.initialize().is_authenticated


def test_vice_chancellor_promotes_lecturer_and_is_audited(engine, identity_for) -> None:
    vc = identity_for("vice_chancellor")
    updated = assign_role(engine, vc, "lecturer@university.edu", "hod")
    assert updated.role == "hod"
    assert find_identity(engine, "lecturer@university.edu").role == "hod"

    [entry] = role_history(engine, "lecturer@university.edu")
    assert (entry["old_role"], entry["new_role"], entry["actor_email"]) == ("lecturer", "hod", vc.email)


def test_assignment_to_same_role_is_a_noop(engine, identity_for) -> None:
    assign_role(engine, identity_for("admin"), "hod@university.edu", "hod")
    assert role_history(engine) == []


def test_actor_without_assign_roles_is_rejected(engine, identity_for) -> None:
    with pytest.raises(RoleAssignmentError):
        assign_role(engine, identity_for("director_academic_planning"), "lecturer@university.edu", "student")


@pytest.mark.parametrize(
    ("actor", "target", "new_role"),
    [
        ("registrar", "lecturer@university.edu", "student"),            # no users.assign_roles
        ("vice_chancellor", "lecturer@university.edu", "vice_chancellor"),  # equal level
        ("vice_chancellor", "hod@university.edu", "admin"),             # above the actor
        ("vice_chancellor", "admin@university.edu", "lecturer"),        # nobody manages admin
        ("admin", "lecturer@university.edu", "admin"),                  # nobody grants admin
        ("admin", "lecturer@university.edu", "dean"),                   # unknown role
    ],
)
def test_hierarchy_limits_assignment(engine, identity_for, actor, target, new_role) -> None:
    with pytest.raises(RoleAssignmentError):
        assign_role(engine, identity_for(actor), target, new_role)
    assert role_history(engine) == []


def test_unknown_user(engine) -> None:
    with pytest.raises(LookupError):
        assign_role(engine, "admin", "ghost@university.edu", "lecturer")


def test_actor_may_be_a_bare_role(engine) -> None:
    updated = assign_role(engine, "admin", "student@university.edu", "lecturer")
    assert updated.role == "lecturer"
    assert role_history(engine)[0]["actor_email"] == "role:admin"


def test_role_changes_table_exists(engine) -> None:
    with engine.begin() as conn:
        assert conn.execute(sa_text("SELECT COUNT(*) FROM role_changes")).scalar() == 0


def test_dashboard_stats(engine) -> None:
    stats = dashboard_stats(engine)["users"]
    assert stats["total"] == len(DIRECTORY_ROLES)
    assert stats["students"] == 1
    assert stats["staff"] == len(ROLE_IDS)
    assert stats["by_role"]["hod"] == 1
