from __future__ import annotations

from _bootstrap import REPO_ROOT, describe_db, load_settings

from src.timeharbor.timeharbor.database.migrations import apply_migrations, list_tables


def main() -> None:
    settings = load_settings()
    db_config = dict(settings.DB_CONFIG)

    applied = apply_migrations(db_config, migrations_dir=REPO_ROOT / "database" / "migrations")
    tables = list_tables(db_config)
    if applied:
        print(f"OK: Applied migrations {applied} -> {describe_db(db_config)} (tables={len(tables)})")
    else:
        print(f"OK: Schema up to date -> {describe_db(db_config)} (tables={len(tables)})")


if __name__ == "__main__":
    main()
