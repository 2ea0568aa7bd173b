"""In-Memory Store — LedgerStore fake for controller and gate tests.

Invariants:
    - Same contract as SqlLedgerStore: read returns None for unwritten keys,
      write_slots applies all values or (when failing) none
    - Every successful write batch is recorded in `writes`
"""

from lessonbook.core.errors import StorageError


class MemoryStore:
    """Dict-backed LedgerStore with an on/off write failure switch."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.slots: dict[str, str] = dict(initial or {})
        self.fail_writes = False
        self.writes: list[dict[str, str]] = []

    async def read_slot(self, key: str) -> str | None:
        return self.slots.get(key)

    async def write_slots(self, values) -> None:
        if self.fail_writes:
            raise StorageError("disk full", "commit")
        self.writes.append(dict(values))
        self.slots.update(values)


class FakeClock:
    """Monotonic millisecond clock, one tick per call."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now
