import os
import sqlite3
import sys

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import Database, WorkoutDayRepository, WorkoutRepository


class TestSchemaMigration:
    def test_adds_missing_columns(self, tmp_path):
        db_file = tmp_path / "test.db"
        conn = sqlite3.connect(str(db_file))
        conn.execute(
            "CREATE TABLE weeks (id INTEGER PRIMARY KEY AUTOINCREMENT, week_number INTEGER, start_date TEXT, end_date TEXT)"
        )
        conn.execute("INSERT INTO weeks (week_number, start_date, end_date) VALUES (1, '2025-01-19', '2025-01-25')")
        conn.execute(
            "CREATE TABLE workout_days (id INTEGER PRIMARY KEY AUTOINCREMENT, week_id INTEGER, name TEXT)"
        )
        conn.execute("INSERT INTO workout_days (week_id, name) VALUES (1, 'Monday')")
        conn.execute("CREATE TABLE workout_days_old (id INTEGER)")
        conn.commit()
        conn.close()

        Database(str(db_file))

        conn = sqlite3.connect(str(db_file))
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='workout_days_old'"
        )
        assert cur.fetchone() is None
        cols = [row[1] for row in conn.execute("PRAGMA table_info(workout_days)").fetchall()]
        assert cols == ["id", "uuid", "week_id", "name", "day_type"]
        conn.close()

        days = WorkoutDayRepository(str(db_file)).fetch_for_week(1)
        assert len(days) == 1
        did, day_uuid, week_id, name, day_type = days[0]
        assert (week_id, name, day_type) == (1, "Monday", "")
        assert len(day_uuid) == 32

    def test_foreign_keys_survive_migration(self, tmp_path):
        db_file = str(tmp_path / "test.db")
        conn = sqlite3.connect(db_file)
        conn.execute(
            "CREATE TABLE workout_days (id INTEGER PRIMARY KEY AUTOINCREMENT, week_id INTEGER, name TEXT)"
        )
        conn.execute(Database._TABLE_DEFINITIONS["workouts"][0])
        conn.commit()
        conn.close()
        Database(db_file)
        conn = sqlite3.connect(db_file)
        refs = [row[2] for row in conn.execute("PRAGMA foreign_key_list(workouts)").fetchall()]
        conn.close()
        assert refs == ["workout_days"]
        assert WorkoutRepository(db_file).fetch_by_name("x") == []
