"""Delete every row from the application tables. The schema is kept."""

from __future__ import annotations

import argparse

from _bootstrap import describe_db, load_settings

from src.timeharbor.timeharbor.database.migrations import truncate_all

# Children before parents.
TABLES = (
    "notifications",
    "user_daily_stats",
    "activity_logs",
    "work_log_replies",
    "work_logs",
    "tickets",
    "members",
    "teams",
    "refresh_tokens",
    "users",
)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--yes", action="store_true", help="confirm deleting all data")
    args = parser.parse_args()

    settings = load_settings()
    db_config = dict(settings.DB_CONFIG)
    if not args.yes:
        raise SystemExit(f"Refusing to clear {describe_db(db_config)} without --yes")

    truncate_all(db_config, TABLES)
    print(f"OK: Cleared {len(TABLES)} tables in {describe_db(db_config)}")


if __name__ == "__main__":
    main()
