# api/router.py
from __future__ import annotations
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
from sqlalchemy.engine import Engine

from api.security import forbidden, require_authenticated, require_permission
from core.policy import DEFAULT_EVALUATOR
from core.rbac import RoleAssignmentError, assign_role
from core.roles import UNIVERSITY_ROLES
from core.session import Identity

router = APIRouter(prefix="/rbac", tags=["rbac"])

CurrentIdentity = Annotated[Identity, Depends(require_authenticated)]


class RoleAssignment(BaseModel):
    role: str


def get_db(request: Request) -> Engine:
    return request.app.state.engine


def _envelope(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": data}


@router.get("/me")
def read_me(identity: CurrentIdentity):
    role = DEFAULT_EVALUATOR.role(identity.role)
    data = identity.model_dump()
    data["full_name"] = identity.full_name
    data["role_info"] = DEFAULT_EVALUATOR.get_role_display_info(identity.role)
    data["level"] = DEFAULT_EVALUATOR.get_role_level(identity.role)
    data["permissions"] = (
        [{"resource": p.resource, "actions": sorted(p.actions)} for p in role.permissions] if role else []
    )
    data["allowed_route_prefixes"] = list(role.allowed_route_prefixes) if role else []
    data["dashboard_widgets"] = DEFAULT_EVALUATOR.get_dashboard_widgets(identity.role)
    return _envelope(data)


@router.get("/roles")
def read_roles(identity: CurrentIdentity):
    roles: List[Dict[str, Any]] = []
    for role in UNIVERSITY_ROLES.values():
        roles.append({
            "id": role.id,
            "display_name": role.display_name,
            "description": role.description,
            "level": role.level,
            "manageable": DEFAULT_EVALUATOR.can_manage_role(identity.role, role.id),
        })
    return _envelope(roles)


@router.get("/check")
def check(identity: CurrentIdentity, resource: str, action: str, path: Optional[str] = None):
    data: Dict[str, Any] = {
        "role": identity.role,
        "resource": resource,
        "action": action,
        "allowed": DEFAULT_EVALUATOR.has_permission(identity.role, resource, action),
    }
    if path is not None:
        data["path"] = path
        data["route_allowed"] = DEFAULT_EVALUATOR.can_access_route(identity.role, path)
    return _envelope(data)


@router.put("/users/{email}/role")
def update_user_role(
    email: str,
    body: RoleAssignment,
    actor: Annotated[Identity, Depends(require_permission("users", "assign_roles"))],
    engine: Annotated[Engine, Depends(get_db)],
):
    try:
        updated = assign_role(engine, actor, email, body.role)
    except LookupError:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=f"User not found: {email}")
    except RoleAssignmentError as e:
        raise forbidden(str(e), body.role, actor.role) from e
    return _envelope(updated.model_dump())
