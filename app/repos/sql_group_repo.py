"""SQLAlchemy implementations of GroupRepo and GroupMembershipRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import GroupMembershipRow, GroupRow
from app.models.group import Group, GroupMembership


class SqlGroupRepo:
    """Satisfies the GroupRepo Protocol using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, group_id: int) -> Group | None:
        row = await self._session.get(GroupRow, group_id)
        if row is None:
            return None
        return _row_to_group(row)

    async def create(
        self, *, name: str, description: str | None = None, is_host: bool = False
    ) -> Group:
        row = GroupRow(name=name, description=description, is_host=is_host)
        self._session.add(row)
        await self._session.flush()
        return _row_to_group(row)

    async def set_stripe_account(
        self, group_id: int, stripe_account_id: int
    ) -> Group | None:
        row = await self._session.get(GroupRow, group_id)
        if row is None:
            return None
        row.stripe_account_id = stripe_account_id
        await self._session.flush()
        return _row_to_group(row)

    async def list_by_stripe_account(self, stripe_account_id: int) -> list[Group]:
        stmt = select(GroupRow).where(GroupRow.stripe_account_id == stripe_account_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_group(r) for r in rows]


class SqlGroupMembershipRepo:
    """Satisfies the GroupMembershipRepo Protocol using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, group_id: int, user_id: str) -> GroupMembership | None:
        row = await self._session.get(GroupMembershipRow, (group_id, user_id))
        if row is None:
            return None
        return _row_to_membership(row)

    async def add(self, membership: GroupMembership) -> None:
        self._session.add(
            GroupMembershipRow(
                group_id=membership.group_id,
                user_id=membership.user_id,
                role=membership.role,
            )
        )
        await self._session.flush()

    async def list_by_group(self, group_id: int) -> list[GroupMembership]:
        stmt = select(GroupMembershipRow).where(GroupMembershipRow.group_id == group_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_membership(r) for r in rows]


def _row_to_group(row: GroupRow) -> Group:
    return Group(
        id=row.id,
        name=row.name,
        description=row.description,
        is_host=bool(row.is_host),
        stripe_account_id=row.stripe_account_id,
    )


def _row_to_membership(row: GroupMembershipRow) -> GroupMembership:
    return GroupMembership(group_id=row.group_id, user_id=row.user_id, role=row.role)
