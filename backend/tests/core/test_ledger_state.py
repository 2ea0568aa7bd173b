"""Tests for LedgerState lookups and id generation."""

import dataclasses

import pytest

from lessonbook.core.ledger_state import (
    ID_LENGTH, ArchiveImage, LedgerState, Student, new_id,
)


def test_new_id_shape():
    value = new_id()
    assert len(value) == ID_LENGTH
    assert value.isalnum()
    assert value == value.lower()


def test_new_id_avoids_taken(monkeypatch):
    picks = iter("a" * ID_LENGTH + "b" * ID_LENGTH)
    monkeypatch.setattr(
        "lessonbook.core.ledger_state.secrets.choice", lambda _: next(picks),
    )
    assert new_id({"a" * ID_LENGTH}) == "b" * ID_LENGTH


def test_find_student_and_image():
    student = Student("s1", "A", "1", 3, 3, 0)
    image = ArchiveImage("i1", "s1", "data:,", "a.png", 0)
    state = LedgerState(students=(student,), archives=(image,))
    assert state.find_student("s1") is student
    assert state.find_student("nope") is None
    assert state.find_image("i1") is image
    assert state.find_image("nope") is None


def test_entities_are_frozen():
    student = Student("s1", "A", "1", 3, 3, 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        student.remaining_lessons = 99
