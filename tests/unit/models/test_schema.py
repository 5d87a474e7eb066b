from __future__ import annotations

from collections import Counter

from sqlalchemy import create_engine, inspect

import app.models  # noqa: F401  registers every table on Base.metadata
from app.core.db import Base


def test_index_names_are_unique_across_tables():
    # SQLite and Postgres both keep index names in one namespace per schema
    names = Counter(
        index.name
        for table in Base.metadata.tables.values()
        for index in table.indexes
        if index.name is not None
    )
    duplicates = [name for name, count in names.items() if count > 1]
    assert duplicates == []


def test_schema_creates_on_fresh_database():
    engine = create_engine("sqlite://")
    try:
        Base.metadata.create_all(engine)
        inspector = inspect(engine)

        index_names = {ix["name"] for ix in inspector.get_indexes("user_activity")}
        assert "ix_user_activity_resource" in index_names
        assert "ix_user_activity_resource_ref" in index_names
        assert set(Base.metadata.tables) <= set(inspector.get_table_names())
    finally:
        engine.dispose()
