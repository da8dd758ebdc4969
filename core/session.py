# core/session.py
"""
Authenticated-identity store shared by every UI surface of a portal.

The state is one immutable value (Uninitialized, Unauthenticated or
Authenticated(identity)); "loading" and "authenticated" are derived from
it instead of being tracked separately. Every transition replaces the
whole value and then notifies subscribers synchronously, in the order
they subscribed, before returning to the caller.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from core.roles import ROLE_IDS

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email


@dataclass(frozen=True)
class Uninitialized:
    is_loading = True
    is_authenticated = False
    identity = None


@dataclass(frozen=True)
class Unauthenticated:
    is_loading = False
    is_authenticated = False
    identity = None


@dataclass(frozen=True)
class Authenticated:
    identity: Identity
    is_loading = False
    is_authenticated = True


AuthState = Union[Uninitialized, Unauthenticated, Authenticated]

Listener = Callable[[AuthState], None]
Authenticator = Callable[[str, str], Identity]
SessionRestorer = Callable[[], Optional[Identity]]


class AuthenticationError(Exception):
    """Credentials rejected, or the account is unknown / inactive."""


class AuthStore:
    def __init__(self, authenticator: Authenticator, restore: Optional[SessionRestorer] = None):
        self._authenticator = authenticator
        self._restore = restore
        self._state: AuthState = Uninitialized()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def identity(self) -> Optional[Identity]:
        return self._state.identity

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _transition(self, new_state: AuthState) -> None:
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                # One broken surface must not stop the others from seeing the new state.
                logger.exception("Auth listener %r failed", listener)

    # ── transitions ──────────────────────────────────────────────────────────

    def initialize(self) -> AuthState:
        """Resolve an existing session once; later calls are no-ops."""
        if not isinstance(self._state, Uninitialized):
            return self._state
        identity = None
        if self._restore is not None:
            try:
                identity = self._restore()
            except Exception:
                logger.exception("Session restore failed; treating as signed out")
                identity = None
        if identity is not None:
            logger.info("Session restored for %s", identity.email)
            self._transition(Authenticated(identity))
        else:
            self._transition(Unauthenticated())
        return self._state

    def login(self, email: str, password: str) -> Identity:
        logger.info("Login attempt for %s", email)
        try:
            identity = self._authenticator(email, password)
        except AuthenticationError:
            logger.warning("Login failed for %s", email)
            self._transition(Unauthenticated())
            raise
        self._transition(Authenticated(identity))
        logger.info("Login successful for %s (role=%s)", identity.email, identity.role)
        return identity

    def logout(self) -> None:
        if self._state.identity is not None:
            logger.info("Logout for %s", self._state.identity.email)
        self._transition(Unauthenticated())

    def expire(self, reason: str = "session expired") -> None:
        """Forced sign-out (401 from the backend, expired token)."""
        logger.warning("Forcing sign-out: %s", reason)
        self._transition(Unauthenticated())

    def update_user(self, identity: Identity) -> None:
        if not isinstance(self._state, Authenticated):
            raise RuntimeError("Cannot update the user of a signed-out session.")
        self._transition(Authenticated(identity))


# ============================================================================
# PORTALS (which roles may enter a given top-level app at all)
# ============================================================================

@dataclass(frozen=True)
class Portal:
    name: str
    title: str
    allowed_roles: FrozenSet[str]

    def admits(self, state: AuthState) -> bool:
        return bool(state.is_authenticated) and state.identity.role in self.allowed_roles


def make_portal(name: str, title: str, allowed_roles: Iterable[str]) -> Portal:
    return Portal(name=name, title=title, allowed_roles=frozenset(allowed_roles))


ADMIN_PORTAL = make_portal("admin", "Administrative Console", ROLE_IDS)
STUDENT_PORTAL = make_portal("student", "Student Portal", ["student", "admin"])

PORTALS = {p.name: p for p in (ADMIN_PORTAL, STUDENT_PORTAL)}


def get_portal(name: str) -> Portal:
    try:
        return PORTALS[name]
    except KeyError:
        raise ValueError(f"Unknown portal: {name!r} (expected one of {sorted(PORTALS)})") from None
