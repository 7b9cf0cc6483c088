from __future__ import annotations

from dataclasses import dataclass

GROUP_ROLES = ("admin", "writer", "viewer")


@dataclass(frozen=True, slots=True)
class Group:
    id: int
    name: str
    description: str | None = None
    is_host: bool = False
    stripe_account_id: int | None = None


@dataclass(frozen=True, slots=True)
class GroupMembership:
    group_id: int
    user_id: str
    role: str  # admin|writer|viewer
