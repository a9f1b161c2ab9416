import os
import sys
import sqlite3

import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import db
from exceptions import StorageError
from fitness_log import FitnessLogStore


def _failing_connect(*args, **kwargs):
    raise sqlite3.OperationalError("disk I/O error")


def test_write_failure_is_surfaced(tmp_path, monkeypatch):
    seen = []
    store = FitnessLogStore(
        str(tmp_path / "log.db"),
        str(tmp_path / "settings.yaml"),
        on_error=lambda action, err: seen.append(action),
    )
    week = store.create_week(1, "2025-01-19", "2025-01-25")

    monkeypatch.setattr(db.sqlite3, "connect", _failing_connect)
    with pytest.raises(StorageError) as info:
        store.create_week(2, "2025-01-26", "2025-02-01")
    assert isinstance(info.value.__cause__, sqlite3.OperationalError)
    with pytest.raises(StorageError):
        store.delete_week(week)
    monkeypatch.undo()

    assert seen == ["create week", "delete week"]
    assert len(store.errors) == 2
    assert store.list_weeks() == [week]


def test_failed_statement_rolls_back(tmp_path):
    repo = db.WeekRepository(str(tmp_path / "log.db"))
    with pytest.raises(StorageError):
        repo.execute("INSERT INTO weeks (week_number) VALUES (1);")
    assert repo.fetch_all_weeks() == []


def test_validation_happens_before_storage(tmp_path, monkeypatch):
    store = FitnessLogStore(str(tmp_path / "log.db"), str(tmp_path / "settings.yaml"))
    monkeypatch.setattr(db.sqlite3, "connect", _failing_connect)
    with pytest.raises(ValueError):
        store.create_week(1, "2025-02-01", "2025-01-01")
    assert store.errors == []
