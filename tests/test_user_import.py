from __future__ import annotations

import io

import pandas as pd
import pytest

from core.rbac import RoleAssignmentError, find_identity, list_users, role_history, upsert_user
from core.user_import import (
    REQUIRED_COLUMNS,
    ImportValidationError,
    import_users,
    read_user_frame,
    template_frame,
)

CSV = b"""Email,First Name,Surname,Role
 Jane.Doe@University.edu ,Jane,Doe,lecturer
sam@university.edu,Sam,Otieno,student
not-an-email,Bad,Row,lecturer
sam@university.edu,Sam,Again,student
pat@university.edu,Pat,Kim,dean
lecturer@university.edu,Existing,Lecturer,academic_secretary
"""


def test_template_has_required_columns() -> None:
    assert list(template_frame().columns) == REQUIRED_COLUMNS


def test_read_csv_normalizes_headers_and_cells() -> None:
    frame = read_user_frame(CSV, filename="users.csv")
    assert list(frame.columns) == REQUIRED_COLUMNS
    assert frame.iloc[0]["email"] == "Jane.Doe@University.edu"
    assert frame.iloc[0]["last_name"] == "Doe"


def test_read_excel(tmp_path) -> None:
    path = tmp_path / "users.xlsx"
    pd.DataFrame([{"email": "a@university.edu", "first_name": "A", "last_name": "B", "role": "lecturer"}]).to_excel(
        path, index=False
    )
    frame = read_user_frame(path)
    assert frame.to_dict(orient="records") == [
        {"email": "a@university.edu", "first_name": "A", "last_name": "B", "role": "lecturer"}
    ]


def test_missing_columns_rejected() -> None:
    with pytest.raises(ImportValidationError, match="role"):
        read_user_frame(io.BytesIO(b"email,first_name,last_name\nx@university.edu,X,Y\n"))


def test_registrar_import_reports_each_row(engine, identity_for) -> None:
    report = import_users(engine, identity_for("registrar"), read_user_frame(CSV, filename="users.csv"))

    assert report.created == ["jane.doe@university.edu", "sam@university.edu"]
    assert report.updated == []
    assert [(e.row, e.message) for e in report.errors] == [
        (4, "invalid or missing email"),
        (5, "duplicate email in file"),
        (6, "unknown role 'dean'"),
        (7, "Role 'registrar' may not assign roles."),
    ]
    assert not report.ok
    assert list(report.to_frame().columns) == ["row", "email", "message"]
    assert find_identity(engine, "jane.doe@university.edu").role == "lecturer"
    assert find_identity(engine, "lecturer@university.edu").role == "lecturer"
    assert role_history(engine) == []


def test_import_cannot_create_or_touch_higher_roles(engine, identity_for) -> None:
    frame = pd.DataFrame([
        {"email": "boss@university.edu", "first_name": "B", "last_name": "S", "role": "vice_chancellor"},
        {"email": "director_mis@university.edu", "first_name": "D", "last_name": "M", "role": "lecturer"},
        {"email": "registrar@university.edu", "first_name": "R", "last_name": "G", "role": "lecturer"},
    ])
    report = import_users(engine, identity_for("registrar"), frame)
    assert report.created == [] and report.updated == []
    assert [e.row for e in report.errors] == [2, 3, 4]
    assert find_identity(engine, "director_mis@university.edu").role == "director_mis"


def test_import_requires_permission(engine, identity_for) -> None:
    with pytest.raises(RoleAssignmentError):
        import_users(engine, identity_for("lecturer"), template_frame())


def test_import_role_change_is_audited(engine, identity_for) -> None:
    vc = identity_for("vice_chancellor")
    frame = pd.DataFrame([{"email": "lecturer@university.edu", "first_name": "Lee", "last_name": "Cturer", "role": "hod"}])
    report = import_users(engine, vc, frame)

    assert report.updated == ["lecturer@university.edu"] and report.ok
    updated = find_identity(engine, "lecturer@university.edu")
    assert (updated.role, updated.first_name) == ("hod", "Lee")
    [entry] = role_history(engine, "lecturer@university.edu")
    assert (entry["old_role"], entry["new_role"], entry["actor_email"]) == ("lecturer", "hod", vc.email)


def test_import_updates_names_without_role_change(engine, identity_for) -> None:
    frame = pd.DataFrame([{"email": "lecturer@university.edu", "first_name": "New", "last_name": "Name", "role": "lecturer"}])
    report = import_users(engine, identity_for("registrar"), frame)
    assert report.updated == ["lecturer@university.edu"] and report.ok
    assert find_identity(engine, "lecturer@university.edu").last_name == "Name"
    assert role_history(engine) == []


def test_import_keeps_deactivated_accounts_inactive(engine, identity_for) -> None:
    upsert_user(engine, "gone@university.edu", "lecturer", "Gone", "User", active=False)
    frame = pd.DataFrame([{"email": "gone@university.edu", "first_name": "Gone", "last_name": "User", "role": "lecturer"}])
    report = import_users(engine, identity_for("registrar"), frame)
    assert report.updated == ["gone@university.edu"]
    assert find_identity(engine, "gone@university.edu") is None
    assert "gone@university.edu" in {u["email"] for u in list_users(engine, include_inactive=True)}


def test_empty_upload_rejected() -> None:
    with pytest.raises(ImportValidationError, match="empty"):
        read_user_frame(b"", filename="users.csv")


def test_unreadable_excel_rejected() -> None:
    with pytest.raises(ImportValidationError):
        read_user_frame(b"not a workbook", filename="users.xlsx")
