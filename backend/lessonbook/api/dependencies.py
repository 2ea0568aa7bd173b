"""Route Dependencies — controller lookup and the session gate.

Invariants:
    - Every ledger route depends on require_session
    - Controllers come from app.state (built in the lifespan), never from module globals
"""

from fastapi import Depends, Header, Request

from lessonbook.core.errors import AuthenticationError
from lessonbook.services.access_gate import AccessGate
from lessonbook.services.ledger_controller import LedgerController

SESSION_HEADER = "X-Session-Token"


def get_controller(request: Request) -> LedgerController:
    return request.app.state.ledger


def get_gate(request: Request) -> AccessGate:
    return request.app.state.gate


def session_token(
    x_session_token: str | None = Header(None, alias=SESSION_HEADER),
) -> str | None:
    return x_session_token


def require_session(
    token: str | None = Depends(session_token),
    gate: AccessGate = Depends(get_gate),
) -> str:
    """Reject the request unless it carries a live session token."""
    if not gate.is_authenticated(token):
        raise AuthenticationError("Login required")
    return token
