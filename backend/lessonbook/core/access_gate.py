"""Access Gate Rules — pure evaluation of a submitted passcode.

Invariants:
    - evaluate_login is PURE: returns an outcome, never persists or grants anything
    - First run (no stored passcode): any passcode of MIN_PASSCODE_LENGTH+ chars becomes it
    - Later runs: exact string equality only, no normalization, no trimming
    - No lockout: a REJECTED outcome carries no state, retry is always allowed

Design Decisions:
    - hmac.compare_digest for equality: same result as ==, constant time
    - Passcode kept plaintext-equivalent; this gate is a deterrent, not a boundary
"""

import hmac

from lessonbook.core.domain_types import LoginOutcome

MIN_PASSCODE_LENGTH: int = 6


def evaluate_login(stored: str | None, submitted: str) -> LoginOutcome:
    """Decide what a login attempt does. Shell applies the outcome."""
    if not stored:
        if len(submitted) < MIN_PASSCODE_LENGTH:
            return LoginOutcome.TOO_SHORT
        return LoginOutcome.PASSCODE_SET

    if hmac.compare_digest(stored.encode("utf-8"), submitted.encode("utf-8")):
        return LoginOutcome.GRANTED
    return LoginOutcome.REJECTED
