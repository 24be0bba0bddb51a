import logging
import os

from sqlalchemy.orm import sessionmaker

from app.core.migrations import RunMigrations
from app.db import BuildConnectionUrl, GetEngine, SqliteDatabasePath
from app.modules.chores.services.seed_service import SeedDefaultData

logger = logging.getLogger("app.bootstrap")


def _env_truthy(name: str, default: bool = False) -> bool:
    value = os.getenv(name, "").strip().lower()
    if not value:
        return default
    return value in {"1", "true", "yes", "on"}


def EnsureDatabaseSetup() -> None:
    url = BuildConnectionUrl()
    db_path = SqliteDatabasePath(url)
    if db_path is not None:
        logger.info("ensuring sqlite directory %s", db_path.parent)
        db_path.parent.mkdir(parents=True, exist_ok=True)

    if _env_truthy("DB_SKIP_MIGRATIONS"):
        logger.info("skipping migrations (managed externally)")
    else:
        RunMigrations()

    if not _env_truthy("BOOTSTRAP_SEED_ENABLED", default=True):
        logger.info("default data seeding disabled")
        return

    session_factory = sessionmaker(bind=GetEngine(), autocommit=False, autoflush=False)
    with session_factory() as db:
        seeded = SeedDefaultData(db)
    if seeded:
        logger.info("seeded default family")
    logger.info("bootstrap complete")
