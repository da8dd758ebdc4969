from __future__ import annotations

import pytest

from core.permissions import PERMISSIONS
from core.policy import (
    can_access_route,
    can_manage_role,
    get_dashboard_widgets,
    get_role_display_info,
    get_role_level,
    has_permission,
    manageable_roles,
    route_matches_prefix,
)
from core.roles import ROLE_IDS, UNIVERSITY_ROLES, get_role


def test_table_has_twelve_roles() -> None:
    assert len(ROLE_IDS) == 12
    assert ROLE_IDS[0] == "admin"
    assert get_role("lecturer").level == 50


@pytest.mark.parametrize(
    ("resource", "action"),
    [("users", "delete"), ("finance", "manage_fees"), ("no_such_resource", "anything")],
)
def test_admin_has_every_permission(resource: str, action: str) -> None:
    assert has_permission("admin", resource, action)


@pytest.mark.parametrize("path", ["/", "/dashboard", "/literally/anything", "/students-old"])
def test_admin_reaches_every_route(path: str) -> None:
    assert can_access_route("admin", path)


@pytest.mark.parametrize("role", ["not_a_real_role", None, "", 42])
def test_unknown_role_fails_closed(role) -> None:
    assert has_permission(role, "students", "read") is False
    assert can_access_route(role, "/dashboard") is False
    assert get_dashboard_widgets(role) == []
    assert get_role_level(role) == 0
    assert get_role_display_info(role) is None


def test_permission_entries_are_unioned(custom_evaluator) -> None:
    assert custom_evaluator.has_permission("clerk", "students", "read")
    assert custom_evaluator.has_permission("clerk", "students", "update")
    assert not custom_evaluator.has_permission("clerk", "students", "delete")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/students", True),
        ("/students/123", True),
        ("/students/123/records", True),
        ("/students-old", False),
        ("/student", False),
        ("/dashboard", False),
        ("", False),
    ],
)
def test_route_prefix_boundaries(custom_evaluator, path: str, expected: bool) -> None:
    assert custom_evaluator.can_access_route("clerk", path) is expected


def test_route_matches_prefix_needs_separator() -> None:
    assert route_matches_prefix("/finance/fees", "/finance")
    assert not route_matches_prefix("/financial-reports", "/finance")


def test_wildcard_route_access(custom_evaluator) -> None:
    assert custom_evaluator.can_access_route("auditor", "/literally/anything")
    assert not custom_evaluator.has_permission("auditor", "students", "read")


def test_admin_bypass_does_not_need_a_table_entry(custom_evaluator) -> None:
    assert custom_evaluator.role("admin") is None
    assert custom_evaluator.has_permission("admin", "students", "delete")


def test_hierarchy_is_strict() -> None:
    assert not can_manage_role("hod", "hod")
    assert can_manage_role("registrar", "lecturer")
    assert not can_manage_role("lecturer", "registrar")
    assert not can_manage_role("director_mis", "director_academic_planning")
    assert not can_manage_role("admin", "admin")
    assert can_manage_role("lecturer", "not_a_real_role")
    assert not can_manage_role("not_a_real_role", "lecturer")


def test_finance_officer_cannot_delete_courses() -> None:
    assert not any(p.resource == "courses" for p in get_role("finance_officer").permissions)
    assert not has_permission("finance_officer", "courses", "delete")


def test_lecturer_uploads_but_cannot_approve_results() -> None:
    assert has_permission("lecturer", "results", "upload")
    assert not has_permission("lecturer", "results", "approve")


def test_dashboard_widgets_keep_table_order_and_are_copies() -> None:
    widgets = get_dashboard_widgets("lecturer")
    assert widgets == ["my_courses", "assigned_students", "results_pending", "teaching_schedule"]
    widgets.append("tampered")
    assert "tampered" not in get_dashboard_widgets("lecturer")


def test_display_info() -> None:
    assert get_role_display_info("hod") == {
        "display_name": "Head of Department",
        "description": "Manages departmental activities and staff",
    }


def test_manageable_roles() -> None:
    assert manageable_roles("lecturer") == []
    assert manageable_roles("registrar") == [
        "hod", "finance_officer", "exams_records_officer", "student_affairs_officer",
        "academic_secretary", "lecturer",
    ]
    assert manageable_roles("admin", ["admin", "student"]) == ["student"]


@pytest.mark.parametrize("role", list(UNIVERSITY_ROLES) + ["not_a_real_role"])
def test_predicates_are_idempotent(role: str) -> None:
    for perm in PERMISSIONS.values():
        for action in sorted(perm.actions):
            assert has_permission(role, perm.resource, action) == has_permission(role, perm.resource, action)
    for path in ["/dashboard", "/students/1", "/finance", "/nowhere"]:
        assert can_access_route(role, path) == can_access_route(role, path)
    assert get_dashboard_widgets(role) == get_dashboard_widgets(role)
    assert get_role_level(role) == get_role_level(role)
