import logging
import sqlite3
import sys

from db import Database
from exceptions import StorageError

logger = logging.getLogger(__name__)


def migrate(db_path='workout.db') -> int:
    """Move legacy weight/sets/reps workout fields into workout_sets rows.

    Returns the number of workouts converted. Running it again is a no-op.
    """
    Database(db_path)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        cur.execute("PRAGMA foreign_keys=on;")
        cur.execute(
            "SELECT w.id, w.weight, w.sets, w.reps FROM workouts w "
            "WHERE (w.weight IS NOT NULL OR w.sets IS NOT NULL OR w.reps IS NOT NULL) "
            "AND NOT EXISTS (SELECT 1 FROM workout_sets s WHERE s.workout_id = w.id);"
        )
        rows = cur.fetchall()
        for wid, weight, sets, reps in rows:
            cur.execute(
                "INSERT INTO workout_sets (workout_id, weight, sets, reps) VALUES (?, ?, ?, ?);",
                (wid, weight or '', sets or '', reps or ''),
            )
            cur.execute(
                "UPDATE workouts SET weight = NULL, sets = NULL, reps = NULL WHERE id = ?;",
                (wid,),
            )
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise StorageError(str(e)) from e
    finally:
        conn.close()
    logger.info("Converted %d legacy workouts in %s", len(rows), db_path)
    return len(rows)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    path = sys.argv[1] if len(sys.argv) > 1 else 'workout.db'
    migrate(path)
