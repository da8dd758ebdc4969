from __future__ import annotations

import threading

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from api.main import IDENTITY_HEADER, create_app, header_identity_resolver
from api.security import (
    AuthorizationFailure,
    authorization_failure_handler,
    require_admin,
    require_role,
)
from core.rbac import find_identity


@pytest.fixture
def client(engine) -> TestClient:
    return TestClient(create_app(engine))


def _as(role: str) -> dict:
    return {IDENTITY_HEADER: f"{role}@university.edu"}


def test_me_requires_authentication(client: TestClient) -> None:
    resp = client.get("/rbac/me")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Authentication required", "error": "NOT_AUTHENTICATED"}


def test_unknown_header_user_is_unauthenticated(client: TestClient) -> None:
    assert client.get("/rbac/me", headers={IDENTITY_HEADER: "ghost@university.edu"}).status_code == 401


def test_me(client: TestClient) -> None:
    data = client.get("/rbac/me", headers=_as("lecturer")).json()["data"]
    assert data["role"] == "lecturer"
    assert data["level"] == 50
    assert data["role_info"]["display_name"] == "Lecturer"
    assert {"resource": "results", "actions": ["read", "update", "upload"]} in data["permissions"]
    assert data["allowed_route_prefixes"] == ["/dashboard", "/my-courses", "/results-upload", "/student-list"]


def test_roles_flags_manageable(client: TestClient) -> None:
    roles = {r["id"]: r for r in client.get("/rbac/roles", headers=_as("registrar")).json()["data"]}
    assert len(roles) == 12
    assert roles["lecturer"]["manageable"] is True
    assert roles["registrar"]["manageable"] is False


def test_check_uses_shared_policy(client: TestClient) -> None:
    resp = client.get(
        "/rbac/check",
        params={"resource": "courses", "action": "delete", "path": "/finance/fees"},
        headers=_as("finance_officer"),
    )
    data = resp.json()["data"]
    assert data["allowed"] is False
    assert data["route_allowed"] is True


def test_assign_role_requires_permission(client: TestClient) -> None:
    resp = client.put("/rbac/users/lecturer@university.edu/role", json={"role": "hod"}, headers=_as("registrar"))
    assert resp.status_code == 403
    assert resp.json() == {
        "success": False,
        "message": "Insufficient permissions",
        "error": "INSUFFICIENT_PERMISSIONS",
        "required": "users.assign_roles",
        "current": "registrar",
    }


def test_assign_role(client: TestClient, engine) -> None:
    resp = client.put("/rbac/users/lecturer@university.edu/role", json={"role": "hod"}, headers=_as("vice_chancellor"))
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "hod"
    assert find_identity(engine, "lecturer@university.edu").role == "hod"


def test_assign_role_hierarchy_violation(client: TestClient) -> None:
    resp = client.put("/rbac/users/admin@university.edu/role", json={"role": "lecturer"}, headers=_as("vice_chancellor"))
    assert resp.status_code == 403
    assert resp.json()["error"] == "INSUFFICIENT_PERMISSIONS"


def test_assign_role_unknown_user(client: TestClient) -> None:
    resp = client.put("/rbac/users/ghost@university.edu/role", json={"role": "hod"}, headers=_as("admin"))
    assert resp.status_code == 404


def _coarse_app(engine) -> TestClient:
    app = FastAPI()
    app.add_exception_handler(AuthorizationFailure, authorization_failure_handler)

    @app.middleware("http")
    async def attach(request, call_next):
        request.state.identity = find_identity(engine, request.headers.get(IDENTITY_HEADER))
        return await call_next(request)

    @app.get("/admin-only", dependencies=[Depends(require_admin)])
    def admin_only():
        return {"ok": True}

    @app.get("/finance-staff", dependencies=[Depends(require_role("finance_officer", "admin"))])
    def finance_staff():
        return {"ok": True}

    return TestClient(app)


def test_require_admin_body(engine) -> None:
    client = _coarse_app(engine)
    assert client.get("/admin-only", headers=_as("admin")).json() == {"ok": True}
    resp = client.get("/admin-only", headers=_as("registrar"))
    assert resp.status_code == 403
    assert resp.json() == {
        "success": False,
        "message": "Admin access required",
        "error": "INSUFFICIENT_PERMISSIONS",
        "required": "admin",
        "current": "registrar",
    }


def test_require_role(engine) -> None:
    client = _coarse_app(engine)
    assert client.get("/finance-staff", headers=_as("finance_officer")).status_code == 200
    resp = client.get("/finance-staff", headers=_as("lecturer"))
    assert resp.json()["required"] == ["finance_officer", "admin"]
    assert client.get("/finance-staff").status_code == 401


def test_identity_resolved_off_the_event_loop(engine) -> None:
    resolver_threads = []

    def resolver(request, eng):
        resolver_threads.append(threading.get_ident())
        return header_identity_resolver(request, eng)

    app = create_app(engine, identity_resolver=resolver)

    @app.get("/loop-thread")
    async def loop_thread():
        return {"thread": threading.get_ident()}

    client = TestClient(app)
    loop_ident = client.get("/loop-thread").json()["thread"]
    assert resolver_threads and resolver_threads[0] != loop_ident
    assert client.get("/rbac/me", headers=_as("hod")).json()["data"]["role"] == "hod"
