"""Stripe Connect onboarding for host groups.

Two steps chained by a browser redirect:

  start_authorize:   checks the group is a host and returns the Stripe
                     authorize URL, with the group id as the OAuth state.
  complete_callback: resolves the state back to a group, exchanges the
                     code for tokens and stores the account, linked to
                     the group.

Every precondition is checked before the outbound token exchange, and
nothing is written until the exchange has succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.core.errors import BadRequestError, NotFoundError, UpstreamError
from app.core.metrics import STRIPE_CONNECT_EVENTS
from app.models.group import Group
from app.models.stripe_account import StripeAccount
from app.repos.group_repo import GroupRepo
from app.repos.stripe_account_repo import StripeAccountRepo
from app.services.stripe_connect import StripeConnect, StripeOAuthError

logger = logging.getLogger(__name__)

GROUP_NOT_FOUND = "Group does not exist"
GROUP_NOT_HOST = "Group is not a host."
MISSING_STATE = "Missing state parameter."
MISSING_CODE = "Missing authorization code."
EXCHANGE_FAILED = "Stripe token exchange failed."
AUTHORIZATION_DENIED = "Stripe authorization was denied."


@dataclass(frozen=True, slots=True)
class ConnectResult:
    group: Group
    account: StripeAccount


def parse_state(state: str | None) -> int | None:
    """Map an OAuth state value back to a group id, or None if it can't be one."""
    if state is None:
        return None
    state = state.strip()
    if not (state.isascii() and state.isdigit()):
        return None
    return int(state)


async def start_authorize(
    groups: GroupRepo, stripe: StripeConnect, group_id: int
) -> str:
    group = await groups.get_by_id(group_id)
    if group is None:
        raise NotFoundError(GROUP_NOT_FOUND)
    if not group.is_host:
        STRIPE_CONNECT_EVENTS.labels(step="authorize", outcome="rejected").inc()
        logger.info("Authorize refused, group is not a host", extra={"group_id": group_id})
        raise BadRequestError(GROUP_NOT_HOST)

    STRIPE_CONNECT_EVENTS.labels(step="authorize", outcome="redirected").inc()
    logger.info("Redirecting group to Stripe authorize", extra={"group_id": group_id})
    return stripe.build_authorize_url(state=str(group.id))


async def complete_callback(
    groups: GroupRepo,
    accounts: StripeAccountRepo,
    stripe: StripeConnect,
    *,
    state: str | None,
    code: str | None,
    error: str | None = None,
    error_description: str | None = None,
) -> ConnectResult:
    try:
        return await _complete_callback(
            groups,
            accounts,
            stripe,
            state=state,
            code=code,
            error=error,
            error_description=error_description,
        )
    except BadRequestError:
        STRIPE_CONNECT_EVENTS.labels(step="callback", outcome="rejected").inc()
        raise
    except UpstreamError:
        STRIPE_CONNECT_EVENTS.labels(step="callback", outcome="upstream_failure").inc()
        raise


async def _complete_callback(
    groups: GroupRepo,
    accounts: StripeAccountRepo,
    stripe: StripeConnect,
    *,
    state: str | None,
    code: str | None,
    error: str | None,
    error_description: str | None,
) -> ConnectResult:
    if state is None or not state.strip():
        raise BadRequestError(MISSING_STATE)

    group_id = parse_state(state)
    group = await groups.get_by_id(group_id) if group_id is not None else None
    if group is None:
        logger.info("Callback state does not match a group")
        raise BadRequestError(GROUP_NOT_FOUND)

    if error:
        # the account owner declined, or Stripe rejected the request
        logger.info(
            "Stripe returned an OAuth error: %s (%s)",
            error,
            error_description or "no description",
            extra={"group_id": group.id},
        )
        raise BadRequestError(AUTHORIZATION_DENIED)

    if code is None or not code.strip():
        raise BadRequestError(MISSING_CODE)

    try:
        grant = await stripe.exchange_code(code.strip())
    except StripeOAuthError as e:
        logger.warning(
            "Stripe token exchange failed: %s", e, extra={"group_id": group.id}
        )
        raise UpstreamError(EXCHANGE_FAILED) from e

    account = await accounts.create(grant)
    linked = await groups.set_stripe_account(group.id, account.id)
    if linked is None:
        # group vanished between lookup and link; the session rolls back
        raise BadRequestError(GROUP_NOT_FOUND)

    STRIPE_CONNECT_EVENTS.labels(step="callback", outcome="linked").inc()
    logger.info(
        "Stripe account linked to group",
        extra={"group_id": linked.id, "stripe_user_id": account.stripe_user_id},
    )
    return ConnectResult(group=linked, account=account)
