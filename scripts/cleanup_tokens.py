"""Delete expired and revoked refresh tokens. Meant to run from cron."""

from __future__ import annotations

from _bootstrap import load_settings

from src.timeharbor.timeharbor.container import build_container


def main() -> None:
    settings = load_settings()
    container = build_container(db_config=dict(settings.DB_CONFIG), secret_key=settings.SECRET_KEY)
    deleted = container.auth_service.cleanup_expired_tokens()
    print(f"OK: Deleted {deleted} refresh tokens")


if __name__ == "__main__":
    main()
