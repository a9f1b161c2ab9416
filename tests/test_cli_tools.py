import io
import os
import sys
import unittest
from contextlib import redirect_stdout

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from cli import backup_db, demo_data, main, restore_db
from config import YamlConfig
from fitness_log import FitnessLogStore


class CLIToolsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        self.yaml_path = "test_cli.yaml"
        self._cleanup()

    def tearDown(self) -> None:
        self._cleanup()

    def _cleanup(self) -> None:
        for path in [self.db_path, self.yaml_path, "backup.db"]:
            if os.path.exists(path):
                os.remove(path)

    def test_demo_data(self) -> None:
        demo_data(self.db_path, self.yaml_path)
        demo_data(self.db_path, self.yaml_path)
        with FitnessLogStore(self.db_path, self.yaml_path) as store:
            weeks = store.list_weeks()
            self.assertEqual(len(weeks), 1)
            days = store.list_workout_days_ordered_by_weekday(weeks[0])
            self.assertEqual([d.name for d in days], ["Monday", "Tuesday", "Wednesday"])
            self.assertEqual(days[1].day_type, "Rest")
            self.assertEqual(store.most_recent_workout("squat").name, "Back Squat")

    def test_backup_restore(self) -> None:
        demo_data(self.db_path, self.yaml_path)
        backup_db(self.db_path, "backup.db")
        self.assertTrue(os.path.exists("backup.db"))
        os.remove(self.db_path)
        restore_db("backup.db", self.db_path)
        with FitnessLogStore(self.db_path, self.yaml_path) as store:
            self.assertEqual(len(store.list_weeks()), 1)

    def test_main_commands(self) -> None:
        common = ["--yaml", self.yaml_path]
        self.assertEqual(main(common + ["demo", "--db", self.db_path]), 0)
        self.assertEqual(main(common + ["migrate", "--db", self.db_path]), 0)
        self.assertEqual(
            main(common + ["progress", "--db", self.db_path, "--name", "Bench Press", "--metric", "volume"]),
            0,
        )
        self.assertEqual(main(common + ["names", "--db", self.db_path, "--search", "Squat"]), 0)
        self.assertEqual(main(common + ["restore", "--in", "missing.db", "--db", self.db_path]), 1)

    def test_progress_shows_weight_unit(self) -> None:
        YamlConfig(self.yaml_path).save({"weight_unit": "lb"})
        demo_data(self.db_path, self.yaml_path)
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["--yaml", self.yaml_path, "progress", "--db", self.db_path, "--name", "Back Squat"])
        self.assertEqual(code, 0)
        self.assertIn("140.0 lb", out.getvalue())


if __name__ == "__main__":
    unittest.main()
