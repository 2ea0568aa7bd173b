"""Ledger Codec — JSON text <-> collection tuples for the durable slots.

Invariants:
    - encode_collection produces a JSON array of camelCase records (epoch-ms dates)
    - decode_collection never raises: absent text or a non-array payload yields an
      empty collection, a malformed row is skipped; each degradation is reported
    - decode(encode(c)) == c for every collection
    - changed_slots lists exactly the collections whose tuple identity changed

Design Decisions:
    - Field mappings as tables over per-entity to/from functions (DRY across 4 entities)
    - Problems returned, not logged: core stays IO-free, the controller logs them
"""

import json
import math
from typing import Any, Callable

from lessonbook.core.domain_types import (
    COLLECTION_SLOTS, LessonChangeType, StorageSlot,
)
from lessonbook.core.ledger_state import (
    ArchiveImage, LedgerState, LessonLog, Review, Student,
)

# (python attribute, durable key) per entity
_FIELD_KEYS: dict[type, tuple[tuple[str, str], ...]] = {
    Student: (
        ("id", "id"), ("name", "name"), ("phone", "phone"),
        ("remaining_lessons", "remainingLessons"),
        ("total_lessons", "totalLessons"), ("join_date", "joinDate"),
    ),
    LessonLog: (
        ("id", "id"), ("student_id", "studentId"),
        ("student_name", "studentName"), ("amount", "amount"),
        ("type", "type"), ("date", "date"), ("note", "note"),
    ),
    Review: (
        ("id", "id"), ("student_id", "studentId"),
        ("student_name", "studentName"), ("content", "content"),
        ("rating", "rating"), ("date", "date"),
    ),
    ArchiveImage: (
        ("id", "id"), ("student_id", "studentId"), ("url", "url"),
        ("name", "name"), ("date", "date"),
    ),
}

_SLOT_ENTITIES: dict[StorageSlot, type] = {
    StorageSlot.STUDENTS: Student,
    StorageSlot.LOGS: LessonLog,
    StorageSlot.REVIEWS: Review,
    StorageSlot.ARCHIVES: ArchiveImage,
}

_SLOT_ATTRS: dict[StorageSlot, str] = {
    StorageSlot.STUDENTS: "students",
    StorageSlot.LOGS: "logs",
    StorageSlot.REVIEWS: "reviews",
    StorageSlot.ARCHIVES: "archives",
}

_INT_ATTRS = frozenset({
    "remaining_lessons", "total_lessons", "join_date", "amount", "rating", "date",
})

# Optional durable keys and their defaults (rows written before a note existed)
_OPTIONAL_DEFAULTS: dict[str, Any] = {"note": "", "name": ""}


def _to_record(item: Any) -> dict:
    record = {}
    for attr, key in _FIELD_KEYS[type(item)]:
        value = getattr(item, attr)
        record[key] = value.value if isinstance(value, LessonChangeType) else value
    return record


def _coerce(attr: str, value: Any) -> Any:
    if attr == "type":
        return LessonChangeType(value)
    if attr in _INT_ATTRS:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{attr} must be numeric")
        if isinstance(value, float) and not (math.isfinite(value) and value.is_integer()):
            raise ValueError(f"{attr} must be a whole number, got {value}")
        return int(value)
    if not isinstance(value, str):
        raise ValueError(f"{attr} must be a string")
    return value


def _from_record(entity: type, record: Any) -> Any:
    if not isinstance(record, dict):
        raise ValueError("row is not an object")
    kwargs = {}
    for attr, key in _FIELD_KEYS[entity]:
        if key not in record:
            if attr in _OPTIONAL_DEFAULTS and entity is not Student:
                kwargs[attr] = _OPTIONAL_DEFAULTS[attr]
                continue
            raise ValueError(f"missing {key}")
        kwargs[attr] = _coerce(attr, record[key])
    return entity(**kwargs)


def encode_collection(items: tuple) -> str:
    """Serialize one collection to its slot text. Pure, no IO."""
    return json.dumps([_to_record(i) for i in items], ensure_ascii=False)


def decode_collection(
    slot: StorageSlot, raw: str | None,
) -> tuple[tuple, list[str]]:
    """Parse slot text into a collection tuple plus a list of problems found."""
    if raw is None:
        return (), []
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        return (), [f"{slot.value}: unparseable JSON ({e})"]
    if not isinstance(payload, list):
        return (), [f"{slot.value}: expected a JSON array, got {type(payload).__name__}"]

    entity = _SLOT_ENTITIES[slot]
    items, problems, seen = [], [], set()
    for index, record in enumerate(payload):
        try:
            item = _from_record(entity, record)
        except (ValueError, TypeError, OverflowError) as e:
            problems.append(f"{slot.value}[{index}]: skipped ({e})")
            continue
        if item.id in seen:
            problems.append(f"{slot.value}[{index}]: skipped (duplicate id {item.id})")
            continue
        seen.add(item.id)
        items.append(item)
    return tuple(items), problems


def decode_state(
    read: Callable[[StorageSlot], str | None],
) -> tuple[LedgerState, list[str]]:
    """Build a LedgerState from a slot reader. Pure given a pure reader."""
    collections, problems = {}, []
    for slot in COLLECTION_SLOTS:
        items, slot_problems = decode_collection(slot, read(slot))
        collections[_SLOT_ATTRS[slot]] = items
        problems.extend(slot_problems)
    return LedgerState(**collections), problems


def collection_for(state: LedgerState, slot: StorageSlot) -> tuple:
    return getattr(state, _SLOT_ATTRS[slot])


def changed_slots(old: LedgerState, new: LedgerState) -> list[StorageSlot]:
    """Slots whose collection was replaced between old and new."""
    return [
        slot for slot in COLLECTION_SLOTS
        if collection_for(old, slot) is not collection_for(new, slot)
    ]


def encode_slots(new: LedgerState, slots: list[StorageSlot]) -> dict[str, str]:
    """Slot-key -> text for the given slots, ready for LedgerStore.write_slots."""
    return {slot.value: encode_collection(collection_for(new, slot)) for slot in slots}
