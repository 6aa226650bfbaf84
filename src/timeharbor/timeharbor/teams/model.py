from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_iso
from ..core.enums import MemberRole, UserStatus


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    code: str
    created_by: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "createdBy": self.created_by,
            "createdAt": to_iso(self.created_at),
        }


@dataclass(frozen=True)
class Member:
    id: str
    user_id: str
    team_id: str
    role: MemberRole
    joined_at: Optional[datetime] = None

    @property
    def is_leader(self) -> bool:
        return self.role == MemberRole.LEADER


@dataclass(frozen=True)
class MemberProfile:
    """Membership joined with the user's public fields."""

    user_id: str
    team_id: str
    full_name: Optional[str]
    email: str
    status: UserStatus
    role: MemberRole
    joined_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.display_name,
            "email": self.email,
            "status": self.status.value,
            "role": self.role.value,
            "joinedAt": to_iso(self.joined_at),
        }
