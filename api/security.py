# api/security.py
"""
Security dependencies for the FastAPI routers.

Authentication itself happens upstream: the app's identity resolver
puts an Identity (or None) on request.state before any route runs.
These dependencies only authorize, using the same evaluator as the
Streamlit console, and fail with AuthorizationFailure.
"""
from __future__ import annotations
import logging
from typing import Annotated, Any, Callable, Dict, Optional

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse

from core.policy import ADMIN_ROLE, DEFAULT_EVALUATOR, PolicyEvaluator
from core.session import Identity

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"


class AuthorizationFailure(Exception):
    """A 401/403 with the flat error body API clients expect."""

    def __init__(self, status_code: int, message: str, error: str,
                 required: Any = None, current: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error
        self.required = required
        self.current = current

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message, "error": self.error}
        if self.required is not None:
            body["required"] = self.required
        if self.current is not None:
            body["current"] = self.current
        return body


def forbidden(message: str, required: Any, current: str) -> AuthorizationFailure:
    return AuthorizationFailure(status.HTTP_403_FORBIDDEN, message, INSUFFICIENT_PERMISSIONS,
                                required=required, current=current)


async def authorization_failure_handler(request: Request, exc: AuthorizationFailure) -> JSONResponse:
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.payload())


def get_current_identity(request: Request) -> Optional[Identity]:
    return getattr(request.state, "identity", None)


def require_authenticated(
    identity: Annotated[Optional[Identity], Depends(get_current_identity)],
) -> Identity:
    if identity is None:
        raise AuthorizationFailure(status.HTTP_401_UNAUTHORIZED, "Authentication required", NOT_AUTHENTICATED)
    return identity


def require_admin(identity: Annotated[Identity, Depends(require_authenticated)]) -> Identity:
    """Coarse admin-only check."""
    if identity.role != ADMIN_ROLE:
        raise forbidden("Admin access required", ADMIN_ROLE, identity.role)
    return identity


def require_role(*roles: str) -> Callable[[Identity], Identity]:
    """Return a dependency that admits only the listed roles."""
    allowed = list(roles)

    def dependency(identity: Annotated[Identity, Depends(require_authenticated)]) -> Identity:
        if identity.role not in allowed:
            raise forbidden("Insufficient permissions", allowed, identity.role)
        return identity

    return dependency


def require_permission(
    resource: str, action: str, evaluator: PolicyEvaluator = DEFAULT_EVALUATOR,
) -> Callable[[Identity], Identity]:
    """Return a dependency that enforces one (resource, action) pair from the role policy."""

    def dependency(identity: Annotated[Identity, Depends(require_authenticated)]) -> Identity:
        if not evaluator.has_permission(identity.role, resource, action):
            raise forbidden("Insufficient permissions", f"{resource}.{action}", identity.role)
        return identity

    return dependency
