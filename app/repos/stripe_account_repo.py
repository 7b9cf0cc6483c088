from __future__ import annotations

from typing import Protocol

from app.models.stripe_account import StripeAccount, StripeTokenGrant


class StripeAccountRepo(Protocol):
    async def create(self, grant: StripeTokenGrant) -> StripeAccount: ...
    async def get_by_id(self, account_id: int) -> StripeAccount | None: ...
    async def list_all(self) -> list[StripeAccount]: ...


class InMemoryStripeAccountRepo:
    def __init__(self) -> None:
        self._by_id: dict[int, StripeAccount] = {}
        self._next_id = 1

    async def create(self, grant: StripeTokenGrant) -> StripeAccount:
        account = StripeAccount.from_grant(self._next_id, grant)
        self._next_id += 1
        self._by_id[account.id] = account
        return account

    async def get_by_id(self, account_id: int) -> StripeAccount | None:
        return self._by_id.get(account_id)

    async def list_all(self) -> list[StripeAccount]:
        return list(self._by_id.values())

    def clear(self) -> None:
        self._by_id.clear()
        self._next_id = 1
