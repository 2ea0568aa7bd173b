"""Ledger Codec — slot text <-> collections, tolerant loading, changed-slot detection.

Tests cover:
    - persisted collections reload equal (camelCase keys on disk)
    - absent, unparseable and non-array slots load empty with a reported problem
    - malformed and duplicate rows are skipped, good rows kept
    - changed_slots reports only replaced collections
"""

import json

import pytest

from lessonbook.core.domain_types import LessonChangeType, StorageSlot
from lessonbook.core.enforce_ledger import add_review, add_student, change_lesson_balance
from lessonbook.core.ledger_codec import (
    changed_slots,
    decode_collection,
    decode_state,
    encode_collection,
    encode_slots,
)
from lessonbook.core.ledger_state import LedgerState


def _sample_state() -> LedgerState:
    state, s = add_student(LedgerState(), "小明", "13800000000", 10, 1_000)
    state, _ = change_lesson_balance(state, s.id, -2, LessonChangeType.CONSUME, None, 2_000)
    state, _ = add_review(state, s.id, None, "Great use of color", 5, 3_000)
    return state


def test_state_survives_encode_then_decode():
    state = _sample_state()
    slots = encode_slots(state, [
        StorageSlot.STUDENTS, StorageSlot.LOGS, StorageSlot.REVIEWS, StorageSlot.ARCHIVES,
    ])
    reloaded, problems = decode_state(lambda slot: slots.get(slot.value))
    assert problems == []
    assert reloaded == state


def test_records_use_camel_case_keys_and_plain_type():
    state = _sample_state()
    students = json.loads(encode_collection(state.students))
    logs = json.loads(encode_collection(state.logs))
    assert set(students[0]) == {
        "id", "name", "phone", "remainingLessons", "totalLessons", "joinDate",
    }
    assert logs[0]["type"] == "consume"
    assert logs[0]["studentName"] == "小明"


def test_absent_slot_is_empty_without_problem():
    items, problems = decode_collection(StorageSlot.STUDENTS, None)
    assert items == ()
    assert problems == []


def test_unparseable_slot_is_empty_with_problem():
    items, problems = decode_collection(StorageSlot.LOGS, "{not json")
    assert items == ()
    assert len(problems) == 1
    assert "edu_logs" in problems[0]


def test_non_array_slot_is_empty_with_problem():
    items, problems = decode_collection(StorageSlot.REVIEWS, '{"id": "x"}')
    assert items == ()
    assert "expected a JSON array" in problems[0]


def test_bad_rows_are_skipped_good_rows_kept():
    raw = json.dumps([
        {"id": "a", "name": "A", "phone": "1", "remainingLessons": 3,
         "totalLessons": 3, "joinDate": 1},
        {"id": "b", "name": "B"},
        "garbage",
        {"id": "c", "name": "C", "phone": "2", "remainingLessons": "lots",
         "totalLessons": 3, "joinDate": 1},
        {"id": "a", "name": "A again", "phone": "1", "remainingLessons": 1,
         "totalLessons": 1, "joinDate": 1},
    ])
    items, problems = decode_collection(StorageSlot.STUDENTS, raw)
    assert [s.id for s in items] == ["a"]
    assert len(problems) == 4


def test_unknown_log_type_row_is_skipped():
    raw = json.dumps([{
        "id": "l", "studentId": "s", "studentName": "A", "amount": 1,
        "type": "gift", "date": 1, "note": "",
    }])
    items, problems = decode_collection(StorageSlot.LOGS, raw)
    assert items == ()
    assert len(problems) == 1


def test_missing_optional_note_and_image_name_default_empty():
    logs, _ = decode_collection(StorageSlot.LOGS, json.dumps([{
        "id": "l", "studentId": "s", "studentName": "A", "amount": 1,
        "type": "refill", "date": 1,
    }]))
    images, _ = decode_collection(StorageSlot.ARCHIVES, json.dumps([{
        "id": "i", "studentId": "s", "url": "data:,", "date": 1,
    }]))
    assert logs[0].note == ""
    assert images[0].name == ""


def test_whole_number_floats_load_as_int():
    items, problems = decode_collection(StorageSlot.STUDENTS, json.dumps([{
        "id": "a", "name": "A", "phone": "1", "remainingLessons": 3,
        "totalLessons": 3, "joinDate": 1700000000000.0,
    }]))
    assert problems == []
    assert items[0].join_date == 1700000000000


def test_changed_slots_tracks_replaced_collections():
    state, s = add_student(LedgerState(), "A", "1", 5, 0)
    after_add_review, _ = add_review(state, s.id, None, "ok", 3, 0)
    assert changed_slots(state, after_add_review) == [StorageSlot.REVIEWS]

    after_change, _ = change_lesson_balance(state, s.id, 1, LessonChangeType.REFILL, None, 0)
    assert changed_slots(state, after_change) == [StorageSlot.STUDENTS, StorageSlot.LOGS]

    assert changed_slots(state, state) == []


def _student_row(**overrides) -> dict:
    row = {
        "id": "a", "name": "A", "phone": "1", "remainingLessons": 3,
        "totalLessons": 3, "joinDate": 1,
    }
    row.update(overrides)
    return row


@pytest.mark.parametrize("raw_number", ["1e999", "Infinity", "-Infinity", "NaN", "1.5"])
def test_non_whole_numbers_skip_the_row(raw_number):
    good = json.dumps(_student_row(id="ok"))
    bad = json.dumps(_student_row(id="bad")).replace(
        '"remainingLessons": 3', f'"remainingLessons": {raw_number}',
    )
    items, problems = decode_collection(StorageSlot.STUDENTS, f"[{good}, {bad}]")
    assert [s.id for s in items] == ["ok"]
    assert len(problems) == 1
    assert "edu_students[1]" in problems[0]
