from alembic import command
from alembic.autogenerate import compare_metadata
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine, inspect

from app.core.migrations import BuildAlembicConfig, CurrentRevision, HeadRevision, RunMigrations
from app.db import Base
from app.modules.auth import models as auth_models  # noqa: F401
from app.modules.chores import models as chores_models  # noqa: F401


def _SqliteUrl(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'chorechart.db'}"


def test_run_migrations_upgrades_empty_database_once(tmp_path):
    url = _SqliteUrl(tmp_path)
    head = HeadRevision(BuildAlembicConfig(url))
    assert head == "0001_chore_chart"

    assert RunMigrations(url) == head

    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            assert CurrentRevision(connection) == head
        assert set(inspect(engine).get_table_names()) == {
            "alembic_version",
            "users",
            "user_sessions",
            "chores",
            "rewards",
            "achievements",
            "chore_completions",
            "reward_claims",
        }
    finally:
        engine.dispose()

    assert RunMigrations(url) == head


def test_migrated_schema_matches_models(tmp_path):
    url = _SqliteUrl(tmp_path)
    command.upgrade(BuildAlembicConfig(url), "head")

    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            diff = compare_metadata(MigrationContext.configure(connection), Base.metadata)
    finally:
        engine.dispose()

    assert diff == []
