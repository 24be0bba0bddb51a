import os
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()
engine = None
SessionLocal = None

DEFAULT_DATABASE_URL = "sqlite:///./data/chorechart.db"


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def BuildConnectionUrl() -> str:
    return os.getenv("DATABASE_URL", "").strip() or DEFAULT_DATABASE_URL


def IsSqliteUrl(url: str) -> bool:
    return url.startswith("sqlite")


def SqliteDatabasePath(url: str) -> Path | None:
    if not IsSqliteUrl(url):
        return None
    _, _, path = url.partition(":///")
    if not path or path == ":memory:" or path.startswith("file:"):
        return None
    return Path(path)


def _EnableSqliteForeignKeys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def CreateDbEngine(url: str):
    if IsSqliteUrl(url):
        db_path = SqliteDatabasePath(url)
        if db_path is not None:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        created = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(created, "connect", _EnableSqliteForeignKeys)
        return created

    pool_size = _read_int_env("SQLALCHEMY_POOL_SIZE", 10)
    max_overflow = _read_int_env("SQLALCHEMY_MAX_OVERFLOW", 20)
    pool_timeout = _read_int_env("SQLALCHEMY_POOL_TIMEOUT", 60)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
    )


def _ensure_engine():
    global engine, SessionLocal
    if engine is None:
        engine = CreateDbEngine(BuildConnectionUrl())
        SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def GetEngine():
    _ensure_engine()
    return engine


def GetDb():
    if SessionLocal is None:
        _ensure_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
