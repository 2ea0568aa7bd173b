"""Access Gate — passcode slot plus session-scoped tokens.

Invariants:
    - The passcode is written once (first successful login) and only compared afterwards
    - Session tokens live in memory only: logout, expiry or a process restart ends the session
    - At most max_sessions tokens are live; a new login evicts the oldest
    - A rejected attempt changes nothing; retry is immediately allowed

Design Decisions:
    - Opaque random tokens over cookies-with-state: the browser holds one header value
    - Rules in core/access_gate.py, persistence and tokens here
"""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable

from lessonbook.core.access_gate import MIN_PASSCODE_LENGTH, evaluate_login
from lessonbook.core.domain_types import LoginOutcome, StorageSlot
from lessonbook.core.errors import AuthenticationError, PasscodeTooShortError
from lessonbook.core.repository_protocols import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    first_run: bool


class AccessGate:
    """Single shared passcode gate."""

    def __init__(
        self,
        store: LedgerStore,
        ttl_seconds: float = 12 * 3600,
        max_sessions: int = 32,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._store = store
        self._ttl = ttl_seconds
        self._max_sessions = max_sessions
        self._clock = clock
        # token -> issue time, oldest first
        self._tokens: dict[str, float] = {}

    async def passcode_set(self) -> bool:
        return bool(await self._store.read_slot(StorageSlot.ADMIN_PASSCODE.value))

    async def login(self, submitted: str) -> LoginResult:
        stored = await self._store.read_slot(StorageSlot.ADMIN_PASSCODE.value)
        outcome = evaluate_login(stored, submitted)

        if outcome == LoginOutcome.TOO_SHORT:
            raise PasscodeTooShortError(MIN_PASSCODE_LENGTH)
        if outcome == LoginOutcome.REJECTED:
            logger.warning("Login rejected", extra={"error_code": "AUTH_FAILED"})
            raise AuthenticationError()
        if outcome == LoginOutcome.PASSCODE_SET:
            await self._store.write_slots(
                {StorageSlot.ADMIN_PASSCODE.value: submitted},
            )
            logger.info("Admin passcode initialized")

        token = secrets.token_urlsafe(32)
        self._issue(token)
        return LoginResult(token=token, first_run=outcome == LoginOutcome.PASSCODE_SET)

    def logout(self, token: str | None) -> None:
        if token:
            self._tokens.pop(token, None)

    def is_authenticated(self, token: str | None) -> bool:
        if not token or token not in self._tokens:
            return False
        if self._clock() - self._tokens[token] >= self._ttl:
            del self._tokens[token]
            return False
        return True

    def _issue(self, token: str) -> None:
        now = self._clock()
        for stale in [t for t, issued in self._tokens.items() if now - issued >= self._ttl]:
            del self._tokens[stale]
        while len(self._tokens) >= self._max_sessions:
            oldest = next(iter(self._tokens))
            del self._tokens[oldest]
            logger.info("Oldest session evicted")
        self._tokens[token] = now
