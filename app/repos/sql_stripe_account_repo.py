"""SQLAlchemy implementation of StripeAccountRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import StripeAccountRow
from app.models.stripe_account import StripeAccount, StripeTokenGrant


class SqlStripeAccountRepo:
    """Satisfies the StripeAccountRepo Protocol using SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, grant: StripeTokenGrant) -> StripeAccount:
        row = StripeAccountRow(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            token_type=grant.token_type,
            stripe_publishable_key=grant.stripe_publishable_key,
            stripe_user_id=grant.stripe_user_id,
            scope=grant.scope,
        )
        self._session.add(row)
        # flush assigns the autoincrement id without committing
        await self._session.flush()
        return _row_to_account(row)

    async def get_by_id(self, account_id: int) -> StripeAccount | None:
        row = await self._session.get(StripeAccountRow, account_id)
        if row is None:
            return None
        return _row_to_account(row)

    async def list_all(self) -> list[StripeAccount]:
        stmt = select(StripeAccountRow).order_by(StripeAccountRow.id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_account(r) for r in rows]


def _row_to_account(row: StripeAccountRow) -> StripeAccount:
    return StripeAccount(
        id=row.id,
        access_token=row.access_token,
        refresh_token=row.refresh_token,
        token_type=row.token_type,
        stripe_publishable_key=row.stripe_publishable_key,
        stripe_user_id=row.stripe_user_id,
        scope=row.scope,
    )
