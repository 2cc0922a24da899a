from __future__ import annotations

from sqlalchemy import create_engine

import app.database.init_db as init_db_module
from app.models import Base


def test_sqlite_file_for_resolves_only_file_backed_sqlite(tmp_path):
    absolute = tmp_path / "tracker.db"

    assert init_db_module.sqlite_file_for(f"sqlite:///{absolute}") == absolute
    assert init_db_module.sqlite_file_for("sqlite:///:memory:") is None
    assert init_db_module.sqlite_file_for("postgresql+psycopg2://u:p@db:5432/invoices") is None
    assert init_db_module.sqlite_file_for("sqlite:///./tracker.db") == (init_db_module.PROJECT_ROOT / "tracker.db").resolve()


def test_set_aside_sqlite_file_renames_existing_database(monkeypatch, tmp_path):
    db_file = tmp_path / "tracker.db"
    db_file.write_bytes(b"not a database")
    rebound = []
    monkeypatch.setattr(init_db_module.db_module, "reset_engine", lambda url=None: rebound.append(url))

    backup = init_db_module.set_aside_sqlite_file(f"sqlite:///{db_file}")

    assert backup is not None
    assert backup.name.startswith("tracker.backup_")
    assert backup.read_bytes() == b"not a database"
    assert not db_file.exists()
    assert rebound == [f"sqlite:///{db_file}"]


def test_set_aside_sqlite_file_without_file_only_rebinds(monkeypatch, tmp_path):
    rebound = []
    monkeypatch.setattr(init_db_module.db_module, "reset_engine", lambda url=None: rebound.append(url))

    assert init_db_module.set_aside_sqlite_file(f"sqlite:///{tmp_path / 'absent.db'}") is None
    assert len(rebound) == 1


def test_missing_tracker_tables_reports_absent_tables(monkeypatch):
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.tables["invoices"].create(bind=engine)
    monkeypatch.setattr(init_db_module.db_module, "get_engine", lambda: engine)

    assert init_db_module.missing_tracker_tables() == ["contracts", "expected_invoices", "dismissed_expected_invoices"]

    Base.metadata.create_all(bind=engine)
    assert init_db_module.missing_tracker_tables() == []
    engine.dispose()
