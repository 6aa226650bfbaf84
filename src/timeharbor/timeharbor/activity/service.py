from __future__ import annotations

from typing import Any, List, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_ACTIVITY_LIMIT
from ..core.exceptions import ValidationError
from ..teams.service import TeamService
from .model import ActivityLog
from .repository import ActivityLogRepository


class ActivityService:
    def __init__(self, activities: ActivityLogRepository, teams: TeamService):
        self._activities = activities
        self._teams = teams

    def list_for_team(self, *, user_id: str, team_id: str, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[ActivityLog]:
        self._teams.require_member(team_id, user_id)
        return list(self._activities.list_for_team(team_id, limit=limit))

    @staticmethod
    def _parse_time(value: Any, field_name: str, *, required: bool) -> Optional[Any]:
        if not value:
            if required:
                raise ValidationError(f"{field_name} is required")
            return None
        try:
            return parse_iso_datetime(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {field_name}")

    def sync(self, *, user_id: str, team_id: str, payload: Any) -> List[str]:
        """Upsert client activities by their id; entries without an id are skipped."""
        self._teams.require_member(team_id, user_id)
        if not isinstance(payload, list):
            raise ValidationError("Expected array of activities")

        synced: list[str] = []
        for item in payload:
            if not isinstance(item, dict) or not item.get("id"):
                continue
            activity = ActivityLog(
                activity_id=str(item["id"]),
                team_id=team_id,
                user_id=user_id,
                type=item.get("type") or "LOG",
                title=require_non_empty(item.get("title"), "Title"),
                subtitle=item.get("subtitle"),
                description=item.get("description"),
                status=item.get("status") or "Completed",
                start_time=self._parse_time(item.get("startTime"), "startTime", required=True),
                end_time=self._parse_time(item.get("endTime"), "endTime", required=False),
                duration=item.get("duration"),
                link=item.get("link"),
            )
            self._activities.upsert(activity)
            synced.append(activity.activity_id)
        return synced
