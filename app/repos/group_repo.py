from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from app.models.group import Group


class GroupRepo(Protocol):
    async def get_by_id(self, group_id: int) -> Group | None: ...
    async def create(
        self, *, name: str, description: str | None = None, is_host: bool = False
    ) -> Group: ...
    async def set_stripe_account(
        self, group_id: int, stripe_account_id: int
    ) -> Group | None: ...
    async def list_by_stripe_account(self, stripe_account_id: int) -> list[Group]: ...


class InMemoryGroupRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, Group] = {}
        self._next_id = 1

    async def get_by_id(self, group_id: int) -> Group | None:
        return self._by_id.get(group_id)

    async def create(
        self, *, name: str, description: str | None = None, is_host: bool = False
    ) -> Group:
        group = Group(
            id=self._next_id, name=name, description=description, is_host=is_host
        )
        self._next_id += 1
        self._by_id[group.id] = group
        return group

    async def set_stripe_account(
        self, group_id: int, stripe_account_id: int
    ) -> Group | None:
        existing = self._by_id.get(group_id)
        if existing is None:
            return None
        updated = replace(existing, stripe_account_id=stripe_account_id)
        self._by_id[group_id] = updated
        return updated

    async def list_by_stripe_account(self, stripe_account_id: int) -> list[Group]:
        return [
            g for g in self._by_id.values() if g.stripe_account_id == stripe_account_id
        ]

    def clear(self) -> None:
        self._by_id.clear()
        self._next_id = 1
