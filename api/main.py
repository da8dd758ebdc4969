# api/main.py
"""FastAPI application exposing the RBAC core to server-side callers."""
from __future__ import annotations
import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.engine import Engine

from api.router import router as rbac_router
from api.security import AuthorizationFailure, authorization_failure_handler
from core.db import get_engine, init_db
from core.rbac import find_identity
from core.session import Identity
from core.settings import configure_logging, load_settings

logger = logging.getLogger(__name__)

# Set by the authenticating reverse proxy in front of the API.
IDENTITY_HEADER = "X-User-Email"

IdentityResolver = Callable[[Request, Engine], Optional[Identity]]


def header_identity_resolver(request: Request, engine: Engine) -> Optional[Identity]:
    """Trust the upstream proxy's identity header and look the user up in the directory."""
    return find_identity(engine, request.headers.get(IDENTITY_HEADER))


def create_app(engine: Engine | None = None, identity_resolver: IdentityResolver | None = None) -> FastAPI:
    """Return a configured FastAPI application."""
    if engine is None:
        settings = load_settings()
        configure_logging(settings)
        engine = get_engine(settings.db.url)
        init_db(engine)
        title = settings.app.name
    else:
        title = "University RBAC"
    resolver = identity_resolver or header_identity_resolver

    app = FastAPI(title=title)
    app.state.engine = engine
    app.state.identity_resolver = resolver

    @app.middleware("http")
    async def attach_identity(request: Request, call_next):
        # Resolvers hit the directory synchronously; keep them off the event loop.
        request.state.identity = await run_in_threadpool(resolver, request, engine)
        return await call_next(request)

    app.add_exception_handler(AuthorizationFailure, authorization_failure_handler)
    app.include_router(rbac_router)
    return app
