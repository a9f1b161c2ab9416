import sqlite3
import datetime
import logging
import uuid
from contextlib import contextmanager
from typing import List, Tuple, Optional

from config import YamlConfig
from exceptions import StorageError
from settings_schema import default_settings, normalize_settings

logger = logging.getLogger(__name__)


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "weeks": (
            """CREATE TABLE weeks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    week_number INTEGER NOT NULL,
                    start_date TEXT NOT NULL,
                    end_date TEXT NOT NULL
                );""",
            ["id", "week_number", "start_date", "end_date"],
        ),
        "workout_days": (
            """CREATE TABLE workout_days (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    uuid TEXT NOT NULL,
                    week_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    day_type TEXT NOT NULL DEFAULT '',
                    FOREIGN KEY(week_id) REFERENCES weeks(id) ON DELETE CASCADE
                );""",
            ["id", "uuid", "week_id", "name", "day_type"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_day_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    notes TEXT,
                    date TEXT,
                    weight TEXT,
                    sets TEXT,
                    reps TEXT,
                    FOREIGN KEY(workout_day_id) REFERENCES workout_days(id) ON DELETE CASCADE
                );""",
            [
                "id",
                "workout_day_id",
                "name",
                "notes",
                "date",
                "weight",
                "sets",
                "reps",
            ],
        ),
        "workout_sets": (
            """CREATE TABLE workout_sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id INTEGER NOT NULL,
                    weight TEXT NOT NULL DEFAULT '',
                    sets TEXT NOT NULL DEFAULT '',
                    reps TEXT NOT NULL DEFAULT '',
                    FOREIGN KEY(workout_id) REFERENCES workouts(id) ON DELETE CASCADE
                );""",
            ["id", "workout_id", "weight", "sets", "reps"],
        ),
        "exercise_names": (
            """CREATE TABLE exercise_names (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    entry TEXT NOT NULL
                );""",
            ["id", "entry"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    def __init__(self, db_path: str = "workout.db") -> None:
        self._db_path = db_path
        self._ensure_schema()

    @contextmanager
    def _connection(self):
        try:
            connection = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageError(f"cannot open database {self._db_path}: {e}") from e
        try:
            connection.execute("PRAGMA foreign_keys=on;")
            yield connection
            connection.commit()
        except sqlite3.Error as e:
            connection.rollback()
            raise StorageError(str(e)) from e
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute("PRAGMA foreign_keys=off;")
            conn.execute("PRAGMA legacy_alter_table=on;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            conn.execute("PRAGMA legacy_alter_table=off;")
            conn.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("Migrating table %s columns %s -> %s", table, existing_cols, columns)
        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "uuid":
                        return "lower(hex(randomblob(16)))"
                    if col in ("day_type", "weight", "sets", "reps") and table != "workouts":
                        return "''"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _exists(self, table: str, row_id: int) -> bool:
        rows = self.fetch_all(f"SELECT 1 FROM {table} WHERE id = ?;", (row_id,))
        return bool(rows)

    def _delete(self, table: str, row_id: int, label: str) -> None:
        if not self._exists(table, row_id):
            raise ValueError(f"{label} not found")
        self.execute(f"DELETE FROM {table} WHERE id = ?;", (row_id,))
        logger.debug("Deleted %s %s", label, row_id)


class WeekRepository(BaseRepository):
    """Repository for week table operations."""

    _COLUMNS = "id, week_number, start_date, end_date"

    def create(self, week_number: int, start_date: str, end_date: str) -> int:
        wid = self.execute(
            "INSERT INTO weeks (week_number, start_date, end_date) VALUES (?, ?, ?);",
            (week_number, start_date, end_date),
        )
        logger.debug("Created week %s (number %s)", wid, week_number)
        return wid

    def fetch_all_weeks(self) -> List[Tuple[int, int, str, str]]:
        return self.fetch_all(
            f"SELECT {self._COLUMNS} FROM weeks ORDER BY start_date, id;"
        )

    def fetch_detail(self, week_id: int) -> Tuple[int, int, str, str]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM weeks WHERE id = ?;", (week_id,)
        )
        if not rows:
            raise ValueError("week not found")
        return rows[0]

    def find_containing(self, date: str) -> Optional[Tuple[int, int, str, str]]:
        """Return the first week whose date range includes ``date``."""
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM weeks WHERE start_date <= ? AND end_date >= ? ORDER BY id LIMIT 1;",
            (date, date),
        )
        return rows[0] if rows else None

    def update_dates(self, week_id: int, start_date: str, end_date: str) -> None:
        self.fetch_detail(week_id)
        self.execute(
            "UPDATE weeks SET start_date = ?, end_date = ? WHERE id = ?;",
            (start_date, end_date, week_id),
        )

    def delete(self, week_id: int) -> None:
        self._delete("weeks", week_id, "week")


class WorkoutDayRepository(BaseRepository):
    """Repository for workout day table operations."""

    _COLUMNS = "id, uuid, week_id, name, day_type"

    def add(self, week_id: int, name: str, day_type: str) -> int:
        if not self._exists("weeks", week_id):
            raise ValueError("week not found")
        return self.execute(
            "INSERT INTO workout_days (uuid, week_id, name, day_type) VALUES (?, ?, ?, ?);",
            (str(uuid.uuid4()), week_id, name, day_type),
        )

    def fetch_for_week(self, week_id: int) -> List[Tuple[int, str, int, str, str]]:
        return self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_days WHERE week_id = ? ORDER BY id;",
            (week_id,),
        )

    def fetch_detail(self, day_id: int) -> Tuple[int, str, int, str, str]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_days WHERE id = ?;", (day_id,)
        )
        if not rows:
            raise ValueError("workout day not found")
        return rows[0]

    def update_name(self, day_id: int, name: str) -> None:
        self.fetch_detail(day_id)
        self.execute(
            "UPDATE workout_days SET name = ? WHERE id = ?;", (name, day_id)
        )

    def update_day_type(self, day_id: int, day_type: str) -> None:
        self.fetch_detail(day_id)
        self.execute(
            "UPDATE workout_days SET day_type = ? WHERE id = ?;", (day_type, day_id)
        )

    def remove(self, day_id: int) -> None:
        self._delete("workout_days", day_id, "workout day")


class WorkoutRepository(BaseRepository):
    """Repository for workout table operations."""

    _COLUMNS = "id, workout_day_id, name, notes, date, weight, sets, reps"

    def create(
        self,
        workout_day_id: int,
        name: str,
        notes: str | None = None,
        date: str | None = None,
        weight: str | None = None,
        sets: str | None = None,
        reps: str | None = None,
    ) -> int:
        if not self._exists("workout_days", workout_day_id):
            raise ValueError("workout day not found")
        if date is None:
            date = datetime.date.today().isoformat()
        return self.execute(
            "INSERT INTO workouts (workout_day_id, name, notes, date, weight, sets, reps) VALUES (?, ?, ?, ?, ?, ?, ?);",
            (workout_day_id, name, notes, date, weight, sets, reps),
        )

    def fetch_for_day(self, workout_day_id: int) -> List[Tuple]:
        return self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts WHERE workout_day_id = ? ORDER BY id;",
            (workout_day_id,),
        )

    def fetch_detail(self, workout_id: int) -> Tuple:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts WHERE id = ?;", (workout_id,)
        )
        if not rows:
            raise ValueError("workout not found")
        return rows[0]

    def fetch_by_name(self, name: str) -> List[Tuple]:
        """Return workouts named exactly ``name`` in insertion order."""
        return self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workouts WHERE name = ? ORDER BY id;",
            (name,),
        )

    def latest_matching(self, text: str) -> Optional[Tuple]:
        """Return the last inserted workout whose name contains ``text``."""
        needle = text.lower()
        rows = self.fetch_all(f"SELECT {self._COLUMNS} FROM workouts ORDER BY id DESC;")
        for row in rows:
            if needle in (row[2] or "").lower():
                return row
        return None

    def update(self, workout_id: int, name: str, notes: str | None) -> None:
        self.fetch_detail(workout_id)
        self.execute(
            "UPDATE workouts SET name = ?, notes = ? WHERE id = ?;",
            (name, notes, workout_id),
        )

    def remove(self, workout_id: int) -> None:
        self._delete("workouts", workout_id, "workout")


class WorkoutSetRepository(BaseRepository):
    """Repository for workout set table operations."""

    _COLUMNS = "id, workout_id, weight, sets, reps"

    def add(self, workout_id: int, weight: str, sets: str, reps: str) -> int:
        if not self._exists("workouts", workout_id):
            raise ValueError("workout not found")
        return self.execute(
            "INSERT INTO workout_sets (workout_id, weight, sets, reps) VALUES (?, ?, ?, ?);",
            (workout_id, weight, sets, reps),
        )

    def fetch_for_workout(self, workout_id: int) -> List[Tuple[int, int, str, str, str]]:
        return self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_sets WHERE workout_id = ? ORDER BY id;",
            (workout_id,),
        )

    def fetch_detail(self, set_id: int) -> Tuple[int, int, str, str, str]:
        rows = self.fetch_all(
            f"SELECT {self._COLUMNS} FROM workout_sets WHERE id = ?;", (set_id,)
        )
        if not rows:
            raise ValueError("set not found")
        return rows[0]

    def update(self, set_id: int, weight: str, sets: str, reps: str) -> None:
        self.fetch_detail(set_id)
        self.execute(
            "UPDATE workout_sets SET weight = ?, sets = ?, reps = ? WHERE id = ?;",
            (weight, sets, reps, set_id),
        )

    def remove(self, set_id: int) -> None:
        self._delete("workout_sets", set_id, "set")


class ExerciseNameRepository(BaseRepository):
    """Repository for the exercise name registry used by autocomplete."""

    def fetch_entries(self) -> List[Tuple[int, str]]:
        return self.fetch_all("SELECT id, entry FROM exercise_names ORDER BY id;")

    def fetch_sorted(self) -> List[str]:
        rows = self.fetch_all("SELECT entry FROM exercise_names ORDER BY entry;")
        return [r[0] for r in rows]

    def find(self, name: str) -> Optional[Tuple[int, str]]:
        """Return the entry equal to ``name`` ignoring case."""
        needle = name.lower()
        for row in self.fetch_entries():
            if row[1].lower() == needle:
                return row
        return None

    def ensure(self, name: str) -> bool:
        """Insert ``name`` unless an entry already matches it ignoring case."""
        if self.find(name) is not None:
            return False
        self.execute("INSERT INTO exercise_names (entry) VALUES (?);", (name,))
        logger.debug("Recorded exercise name %r", name)
        return True

    def search(self, query: str, limit: int = 10) -> List[str]:
        """Return entries containing ``query`` ignoring case."""
        needle = query.lower()
        matches = [entry for _, entry in self.fetch_entries() if needle in entry.lower()]
        return matches[:limit]

    def remove(self, entry: str) -> None:
        rows = self.fetch_all(
            "SELECT id FROM exercise_names WHERE entry = ?;", (entry,)
        )
        if not rows:
            raise ValueError("entry not found")
        self.execute("DELETE FROM exercise_names WHERE entry = ?;", (entry,))


class SettingsRepository(BaseRepository):
    """Repository for general application settings synchronized with YAML."""

    def __init__(
        self, db_path: str = "workout.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._init_settings()
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _init_settings(self) -> None:
        with self._connection() as conn:
            for key, value in default_settings().items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, str(value)),
                )

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        return normalize_settings(dict(rows))

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        data = normalize_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        normalize_settings({**self._raw_all_settings(), key: value})
        self.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (key, value),
        )
        self._sync_to_yaml()

    def set_int(self, key: str, value: int) -> None:
        self.set_text(key, str(value))
