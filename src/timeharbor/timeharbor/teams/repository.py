from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import MemberRole
from .model import Member, MemberProfile, Team


class TeamRepository(Protocol):
    def create_team(
        self,
        *,
        team_id: str,
        name: str,
        code: str,
        created_by: str,
        created_at: Optional[datetime] = None,
    ) -> None:
        raise NotImplementedError

    def get_by_id(self, team_id: str) -> Optional[Team]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Team]:
        raise NotImplementedError

    def list_for_user(self, user_id: str) -> Sequence[Team]:
        raise NotImplementedError

    def update_name(self, team_id: str, name: str) -> bool:
        raise NotImplementedError

    def delete(self, team_id: str) -> bool:
        raise NotImplementedError

    def add_member(self, *, team_id: str, user_id: str, role: MemberRole) -> Member:
        raise NotImplementedError

    def get_member(self, team_id: str, user_id: str) -> Optional[Member]:
        raise NotImplementedError

    def list_members(self, team_id: str) -> Sequence[MemberProfile]:
        raise NotImplementedError

    def remove_member(self, team_id: str, user_id: str) -> bool:
        raise NotImplementedError

    def set_member_role(self, team_id: str, user_id: str, role: MemberRole) -> bool:
        raise NotImplementedError

    def count_members(self, team_id: str) -> int:
        raise NotImplementedError
