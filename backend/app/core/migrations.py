from pathlib import Path
import logging
import os
import threading
import time

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import create_engine

from app.db import BuildConnectionUrl

logger = logging.getLogger("app.migrations")

BACKEND_DIR = Path(__file__).resolve().parents[2]
DEFAULT_TIMEOUT_SECONDS = 60


def _TimeoutSeconds() -> int:
    raw = os.getenv("MIGRATIONS_TIMEOUT_SECONDS", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


def BuildAlembicConfig(url: str | None = None) -> Config:
    config_path = BACKEND_DIR / "alembic.ini"
    if not config_path.exists():
        raise RuntimeError("Missing alembic.ini for migrations")

    alembic_cfg = Config(str(config_path))
    alembic_cfg.set_main_option("sqlalchemy.url", url or BuildConnectionUrl())
    alembic_cfg.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def HeadRevision(alembic_cfg: Config) -> str | None:
    return ScriptDirectory.from_config(alembic_cfg).get_current_head()


def CurrentRevision(connection) -> str | None:
    return MigrationContext.configure(connection).get_current_revision()


def _ReadRevision(url: str) -> str | None:
    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            return CurrentRevision(connection)
    finally:
        engine.dispose()


def RunMigrations(url: str | None = None) -> str | None:
    """Upgrade the database to the newest revision and return it.

    The upgrade runs on a worker thread and gives up after
    MIGRATIONS_TIMEOUT_SECONDS; zero or less waits forever.
    """
    alembic_cfg = BuildAlembicConfig(url)
    target_url = alembic_cfg.get_main_option("sqlalchemy.url")
    head = HeadRevision(alembic_cfg)
    current = _ReadRevision(target_url)
    if current == head:
        logger.info("schema already at revision %s", head)
        return head

    timeout_seconds = _TimeoutSeconds()
    logger.info(
        "upgrading schema from %s to %s (timeout=%ss)",
        current or "empty",
        head,
        timeout_seconds,
    )

    failures: list[Exception] = []

    def _Upgrade() -> None:
        try:
            command.upgrade(alembic_cfg, "head")
        except Exception as exc:  # noqa: BLE001
            failures.append(exc)

    worker = threading.Thread(target=_Upgrade, name="alembic-upgrade", daemon=True)
    started = time.monotonic()
    worker.start()
    worker.join(timeout_seconds if timeout_seconds > 0 else None)

    if worker.is_alive():
        logger.error("schema upgrade still running after %ss", timeout_seconds)
        raise TimeoutError(f"migrations timed out after {timeout_seconds}s")
    if failures:
        logger.error("schema upgrade to %s failed", head, exc_info=failures[0])
        raise RuntimeError("migrations failed") from failures[0]

    logger.info("schema upgraded to %s in %.1fs", head, time.monotonic() - started)
    return head
