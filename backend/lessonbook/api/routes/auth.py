"""Auth — passcode login, logout and gate status.

Invariants:
    - First login ever sets the passcode (min 6 chars) and opens a session
    - Later logins compare exactly; mismatch is 401 with no lockout
    - Logout ends only the caller's session

Design Decisions:
    - Token returned in the body; the browser sends it back as X-Session-Token
"""

from fastapi import APIRouter, Depends, status

from lessonbook.api.dependencies import get_gate, session_token
from lessonbook.schemas.ledger import GateStatusResponse, LoginRequest, LoginResponse
from lessonbook.services.access_gate import AccessGate

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, gate: AccessGate = Depends(get_gate)):
    result = await gate.login(body.passcode)
    return LoginResponse(token=result.token, first_run=result.first_run)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str | None = Depends(session_token),
    gate: AccessGate = Depends(get_gate),
):
    gate.logout(token)


@router.get("/status", response_model=GateStatusResponse)
async def gate_status(
    token: str | None = Depends(session_token),
    gate: AccessGate = Depends(get_gate),
):
    return GateStatusResponse(
        passcode_set=await gate.passcode_set(),
        authenticated=gate.is_authenticated(token),
    )
