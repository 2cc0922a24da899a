"""Bring the invoice tracker schema up to date before the API serves requests.

Run directly (``python -m app.database.init_db``) or through the FastAPI
lifespan. Alembic owns the schema; ``create_all`` only fills in tables a
hand-edited SQLite file may be missing.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy import inspect

import app.database.db as db_module
from app.core.startup import bootstrap
from app.models import Base
from app.services.pdf_store import PdfStore

PROJECT_ROOT = Path(__file__).resolve().parents[2]
TRACKER_TABLES = ("invoices", "contracts", "expected_invoices", "dismissed_expected_invoices")

logger = logging.getLogger(__name__)


def alembic_config_for(database_url: str) -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def sqlite_file_for(database_url: str) -> Path | None:
    """Filesystem path behind a ``sqlite:///`` URL; ``None`` for in-memory or other backends."""
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return None
    raw = database_url[len(prefix):]
    if raw in {"", ":memory:"}:
        return None
    path = Path(raw)
    return path if path.is_absolute() else (PROJECT_ROOT / path).resolve()


def set_aside_sqlite_file(database_url: str) -> Path | None:
    """Rename an unmigratable SQLite file to ``<stem>.backup_<utc stamp>`` and rebind the engine."""
    db_file = sqlite_file_for(database_url)
    backup: Path | None = None
    if db_file is not None and db_file.exists():
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        backup = db_file.with_name(f"{db_file.stem}.backup_{stamp}{db_file.suffix}")
        db_module.get_engine().dispose()
        db_file.replace(backup)
    db_module.reset_engine(database_url)
    return backup


def missing_tracker_tables() -> list[str]:
    present = set(inspect(db_module.get_engine()).get_table_names())
    return [name for name in TRACKER_TABLES if name not in present]


def _upgrade(database_url: str) -> None:
    try:
        command.upgrade(alembic_config_for(database_url), "head")
    except Exception as exc:
        # Only a throwaway local SQLite file is ever set aside; other backends fail loudly.
        if sqlite_file_for(database_url) is None:
            raise
        backup = set_aside_sqlite_file(database_url)
        logger.warning(
            "database.sqlite.set_aside",
            extra={
                "event": "database.sqlite.set_aside",
                "backup_path": str(backup) if backup else None,
                "reason": str(exc),
            },
        )
        command.upgrade(alembic_config_for(database_url), "head")


def init_db() -> list[str]:
    """Migrate to head, create any missing tracker tables and the PDF folders.

    Returns the tracker tables that had to be created outside Alembic.
    """
    bootstrap()
    database_url = db_module.get_active_database_url()
    _upgrade(database_url)

    missing = missing_tracker_tables()
    if missing:
        Base.metadata.create_all(bind=db_module.get_engine())
        logger.warning(
            "database.tables.backfilled",
            extra={"event": "database.tables.backfilled", "tables": missing},
        )

    PdfStore().ensure_dirs()
    logger.info(
        "database.ready",
        extra={"event": "database.ready", "database_scheme": database_url.split("://", 1)[0]},
    )
    return missing


if __name__ == "__main__":
    init_db()
