import argparse
import datetime
import logging
import shutil
import sys

from config import YamlConfig
from exceptions import FitnessLogError
from fitness_log import FitnessLogStore
from migrate import migrate
from stats_service import StatisticsService


def configure_logging(yaml_path: str) -> None:
    try:
        level = str(YamlConfig(yaml_path).load().get("log_level", "INFO")).upper()
    except ValueError:
        level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(levelname)s: %(message)s",
    )


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(db_path: str, yaml_path: str) -> None:
    """Populate the database with a demo week if empty."""
    with FitnessLogStore(db_path, yaml_path) as store:
        if store.list_weeks():
            print("Database already contains weeks")
            return
        week = store.create_week_for(datetime.date.today(), 1)
        push = store.create_workout_day(week, "Monday", "Push")
        store.create_workout_day(week, "Tuesday", "")
        legs = store.create_workout_day(week, "Wednesday", "Legs")
        bench = store.create_workout(push, "Bench Press", "Felt strong")
        store.add_set(bench, "100", "3", "10")
        store.add_set(bench, "110", "2", "8")
        squat = store.create_workout(legs, "Back Squat")
        store.add_set(squat, "140", "5", "5")
        print("Demo data inserted")


def show_progress(db_path: str, yaml_path: str, name: str, metric: str) -> None:
    with FitnessLogStore(db_path, yaml_path) as store:
        series = StatisticsService(store).progress_series(name, metric)
        unit = store.settings.get_text("weight_unit", "kg")
    if not series:
        print(f"No data for {name}")
        return
    for point in series:
        print(f"{point['index']}\t{point['date'] or '-'}\t{point['value']:.1f} {unit}")


def list_names(db_path: str, yaml_path: str, search: str) -> None:
    with FitnessLogStore(db_path, yaml_path) as store:
        for entry in store.list_exercise_names(search):
            print(entry.entry)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Workout log utility commands")
    parser.add_argument("--yaml", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default="workout.db")

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="workout.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="workout.db")

    mig = sub.add_parser("migrate")
    mig.add_argument("--db", default="workout.db")

    prog = sub.add_parser("progress")
    prog.add_argument("--db", default="workout.db")
    prog.add_argument("--name", required=True)
    prog.add_argument("--metric", choices=["weight", "volume"], default="weight")

    names = sub.add_parser("names")
    names.add_argument("--db", default="workout.db")
    names.add_argument("--search", default="")

    args = parser.parse_args(argv)
    configure_logging(args.yaml)

    try:
        if args.cmd == "demo":
            demo_data(args.db, args.yaml)
        elif args.cmd == "backup":
            backup_db(args.db, args.out)
        elif args.cmd == "restore":
            restore_db(args.src, args.db)
        elif args.cmd == "migrate":
            count = migrate(args.db)
            print(f"Migrated {count} workouts")
        elif args.cmd == "progress":
            show_progress(args.db, args.yaml, args.name, args.metric)
        elif args.cmd == "names":
            list_names(args.db, args.yaml, args.search)
    except (FitnessLogError, OSError) as e:
        logging.getLogger(__name__).error("%s failed: %s", args.cmd, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
