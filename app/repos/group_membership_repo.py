from __future__ import annotations

from typing import Protocol

from app.models.group import GroupMembership


class GroupMembershipRepo(Protocol):
    async def get(self, group_id: int, user_id: str) -> GroupMembership | None: ...
    async def add(self, membership: GroupMembership) -> None: ...
    async def list_by_group(self, group_id: int) -> list[GroupMembership]: ...


class InMemoryGroupMembershipRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[int, str], GroupMembership] = {}

    async def get(self, group_id: int, user_id: str) -> GroupMembership | None:
        return self._store.get((group_id, user_id))

    async def add(self, membership: GroupMembership) -> None:
        key = (membership.group_id, membership.user_id)
        if key in self._store:
            raise ValueError("membership already exists")
        self._store[key] = membership

    async def list_by_group(self, group_id: int) -> list[GroupMembership]:
        return [m for m in self._store.values() if m.group_id == group_id]

    def clear(self) -> None:
        self._store.clear()
