from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class StripeTokenGrant:
    """Fields returned by Stripe's ``/oauth/token`` for a Connect account.

    Values are opaque and stored verbatim.
    """

    access_token: str
    refresh_token: str
    token_type: str
    stripe_publishable_key: str
    stripe_user_id: str
    scope: str

    # Keep secrets out of tracebacks and debug logs.
    def __repr__(self) -> str:
        return (
            f"StripeTokenGrant(stripe_user_id={self.stripe_user_id!r}, "
            f"token_type={self.token_type!r}, scope={self.scope!r})"
        )


@dataclass(frozen=True, slots=True)
class StripeAccount:
    id: int
    access_token: str
    refresh_token: str
    token_type: str
    stripe_publishable_key: str
    stripe_user_id: str
    scope: str

    @staticmethod
    def from_grant(account_id: int, grant: StripeTokenGrant) -> StripeAccount:
        return StripeAccount(
            id=account_id,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            token_type=grant.token_type,
            stripe_publishable_key=grant.stripe_publishable_key,
            stripe_user_id=grant.stripe_user_id,
            scope=grant.scope,
        )

    def __repr__(self) -> str:
        return (
            f"StripeAccount(id={self.id!r}, stripe_user_id={self.stripe_user_id!r}, "
            f"scope={self.scope!r})"
        )
