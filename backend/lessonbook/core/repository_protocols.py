"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass in-memory fakes without inheritance
    - Async in Protocol: implementations do IO, but the core functions that
      feed them are never async — the controller orchestrates around the pure logic
"""

from typing import Mapping, Protocol


class LedgerStore(Protocol):
    """Durable key-value slots — one JSON text value per key."""

    async def read_slot(self, key: str) -> str | None: ...

    async def write_slots(self, values: Mapping[str, str]) -> None:
        """Replace every given slot atomically (all or none)."""
        ...
