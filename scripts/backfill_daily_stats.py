"""Rebuild user_daily_stats from the full work-log history."""

from __future__ import annotations

from _bootstrap import load_settings

from src.timeharbor.timeharbor.container import build_container


def main() -> None:
    settings = load_settings()
    container = build_container(db_config=dict(settings.DB_CONFIG), secret_key=settings.SECRET_KEY)
    count = container.daily_stats_service.backfill_all()
    print(f"OK: Recomputed daily stats for {count} user/team pairs")


if __name__ == "__main__":
    main()
