from __future__ import annotations

import logging
import secrets
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import normalize_email, parse_enum, require_non_empty
from ..core.constants import TEAM_CODE_ALPHABET, TEAM_CODE_LENGTH
from ..core.enums import MemberRole
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from ..users.model import User
from ..users.repository import UserRepository
from .model import Member, MemberProfile, Team
from .qr import render_join_code_png
from .repository import TeamRepository

logger = logging.getLogger(__name__)

NOT_A_MEMBER_MESSAGE = "You are not a member of this team"


def generate_team_code(length: int = TEAM_CODE_LENGTH) -> str:
    return "".join(secrets.choice(TEAM_CODE_ALPHABET) for _ in range(length))


class TeamService:
    """Use cases: teams, membership and roles."""

    def __init__(
        self,
        teams: TeamRepository,
        users: UserRepository,
        notifications: NotificationService,
        *,
        code_generator: Callable[[], str] = generate_team_code,
    ):
        self._teams = teams
        self._users = users
        self._notifications = notifications
        self._code_generator = code_generator

    # -------- Guards shared with other modules --------
    def get_team(self, team_id: str) -> Team:
        team = self._teams.get_by_id(team_id)
        if not team:
            raise NotFoundError("Team not found")
        return team

    def require_member(self, team_id: str, user_id: str) -> Member:
        self.get_team(team_id)
        member = self._teams.get_member(team_id, user_id)
        if not member:
            raise AuthorizationError(NOT_A_MEMBER_MESSAGE)
        return member

    def require_leader(self, team_id: str, user_id: str) -> Member:
        member = self.require_member(team_id, user_id)
        if not member.is_leader:
            raise AuthorizationError("Only team leaders can perform this action")
        return member

    def is_member(self, team_id: str, user_id: str) -> bool:
        return self._teams.get_member(team_id, user_id) is not None

    def leader_ids(self, team_id: str) -> List[str]:
        return [m.user_id for m in self._teams.list_members(team_id) if m.role == MemberRole.LEADER]

    def team_ids_for_user(self, user_id: str) -> List[str]:
        return [t.id for t in self._teams.list_for_user(user_id)]

    def count_members(self, team_id: str) -> int:
        return self._teams.count_members(team_id)

    # -------- Teams --------
    def _unique_code(self) -> str:
        for _ in range(10):
            code = self._code_generator()
            if not self._teams.get_by_code(code):
                return code
        raise ConflictError("Could not generate a unique team code")

    def create_team(
        self,
        user: User,
        *,
        name: str,
        code: Optional[str] = None,
        team_id: Optional[str] = None,
        created_at: Optional[str] = None,
    ) -> Team:
        name = require_non_empty(name, "Team name")
        if code:
            code = code.strip().upper()
            if self._teams.get_by_code(code):
                raise ConflictError("Team with this code already exists")
        else:
            code = self._unique_code()

        created: Optional[datetime] = None
        if created_at:
            try:
                created = parse_iso_datetime(created_at)
            except ValueError:
                raise ValidationError("Invalid createdAt timestamp")

        team_id = team_id or str(uuid.uuid4())
        if self._teams.get_by_id(team_id):
            raise ConflictError("Team already exists")

        self._teams.create_team(team_id=team_id, name=name, code=code, created_by=user.id, created_at=created)
        self._teams.add_member(team_id=team_id, user_id=user.id, role=MemberRole.LEADER)
        logger.info("Team %s created by %s", team_id, user.id)
        return self.get_team(team_id)

    def list_teams(self, user_id: str) -> List[dict]:
        out: list[dict] = []
        for team in self._teams.list_for_user(user_id):
            members = self._teams.list_members(team.id)
            role = next((m.role for m in members if m.user_id == user_id), MemberRole.MEMBER)
            item = team.to_dict()
            item["role"] = role.value
            item["members"] = [m.to_dict() for m in members]
            out.append(item)
        return out

    def join_team(self, user: User, *, code: str) -> Team:
        code = require_non_empty(code, "Team code").upper()
        team = self._teams.get_by_code(code)
        if not team:
            raise NotFoundError("Team not found")
        if self._teams.get_member(team.id, user.id):
            raise ConflictError("You are already a member of this team")

        self._teams.add_member(team_id=team.id, user_id=user.id, role=MemberRole.MEMBER)
        leaders = [uid for uid in self.leader_ids(team.id) if uid != user.id]
        if leaders:
            self._notifications.new_team_member(
                leader_ids=leaders,
                team_id=team.id,
                team_name=team.name,
                member_name=user.display_name,
            )
        return team

    def update_team(self, user_id: str, team_id: str, *, name: str) -> Team:
        self.require_leader(team_id, user_id)
        name = require_non_empty(name, "Team name")
        self._teams.update_name(team_id, name)
        return self.get_team(team_id)

    def delete_team(self, user_id: str, team_id: str) -> None:
        self.require_leader(team_id, user_id)
        self._teams.delete(team_id)
        logger.info("Team %s deleted by %s", team_id, user_id)

    # -------- Members --------
    def _profile(self, team_id: str, user_id: str) -> MemberProfile:
        for m in self._teams.list_members(team_id):
            if m.user_id == user_id:
                return m
        raise NotFoundError("Member not found")

    def add_member_by_email(self, user_id: str, team_id: str, *, email: str) -> MemberProfile:
        self.require_leader(team_id, user_id)
        email = normalize_email(email)
        invitee = self._users.get_by_email(email)
        if not invitee:
            raise NotFoundError("User not found")
        if self._teams.get_member(team_id, invitee.id):
            raise ConflictError("User is already a member of this team")

        self._teams.add_member(team_id=team_id, user_id=invitee.id, role=MemberRole.MEMBER)
        team = self.get_team(team_id)
        self._notifications.team_invitation(user_id=invitee.id, team_id=team.id, team_name=team.name)
        return self._profile(team_id, invitee.id)

    def _ensure_not_last_leader(self, team_id: str, member: Member) -> None:
        if member.is_leader and len(self.leader_ids(team_id)) <= 1:
            raise ValidationError("A team must keep at least one leader")

    def remove_member(self, user_id: str, team_id: str, member_user_id: str) -> None:
        if user_id != member_user_id:
            self.require_leader(team_id, user_id)
        else:
            self.require_member(team_id, user_id)

        member = self._teams.get_member(team_id, member_user_id)
        if not member:
            raise NotFoundError("Member not found")
        self._ensure_not_last_leader(team_id, member)
        self._teams.remove_member(team_id, member_user_id)

    def change_role(self, user_id: str, team_id: str, member_user_id: str, *, role: str) -> MemberProfile:
        self.require_leader(team_id, user_id)
        new_role = parse_enum(MemberRole, role, "role")
        member = self._teams.get_member(team_id, member_user_id)
        if not member:
            raise NotFoundError("Member not found")
        if new_role == MemberRole.MEMBER:
            self._ensure_not_last_leader(team_id, member)

        self._teams.set_member_role(team_id, member_user_id, new_role)
        return self._profile(team_id, member_user_id)

    def join_qr_png(self, user_id: str, team_id: str) -> bytes:
        self.require_member(team_id, user_id)
        return render_join_code_png(self.get_team(team_id).code)
