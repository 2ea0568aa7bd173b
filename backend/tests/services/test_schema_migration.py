"""Alembic migration vs. ORM metadata — both paths must build the same storage_slots."""

import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

import lessonbook.models  # noqa: F401
from lessonbook.db.base import Base

MIGRATION = (
    Path(__file__).resolve().parents[2] / "alembic" / "versions" / "001_storage_slots.py"
)


def _load_migration():
    spec = importlib.util.spec_from_file_location("storage_slots_migration", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _describe(engine) -> tuple:
    inspector = inspect(engine)
    pk = inspector.get_pk_constraint("storage_slots")
    columns = {
        c["name"]: c["nullable"] for c in inspector.get_columns("storage_slots")
    }
    return pk["name"], tuple(pk["constrained_columns"]), columns


def test_migration_matches_create_all():
    migrated = create_engine("sqlite://")
    with migrated.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            _load_migration().upgrade()

    created = create_engine("sqlite://")
    Base.metadata.create_all(created)

    assert _describe(migrated) == _describe(created)
    assert _describe(migrated)[0] == "pk_storage_slots"
