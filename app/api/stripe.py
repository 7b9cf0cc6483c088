"""Stripe Connect OAuth endpoints.

  GET /groups/{group_id}/stripe/authorize   302 to connect.stripe.com
  GET /stripe/oauth/callback                Stripe redirects the browser here
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from app.api.dependencies import (
    SessionDep,
    get_group_repo,
    get_stripe_account_repo,
    get_stripe_client,
    require_user,
)
from app.models.principal import Principal
from app.repos.group_repo import GroupRepo
from app.repos.stripe_account_repo import StripeAccountRepo
from app.services import stripe_service
from app.services.stripe_connect import StripeConnect

router = APIRouter(tags=["stripe"])


class StripeAccountOut(BaseModel):
    id: int
    stripeUserId: str
    stripePublishableKey: str
    tokenType: str
    scope: str


class CallbackOut(BaseModel):
    groupId: int
    stripeAccount: StripeAccountOut


@router.get("/groups/{group_id}/stripe/authorize")
async def authorize(
    group_id: int,
    _principal: Annotated[Principal, Depends(require_user)],
    groups: Annotated[GroupRepo, Depends(get_group_repo)],
    stripe: Annotated[StripeConnect, Depends(get_stripe_client)],
) -> RedirectResponse:
    url = await stripe_service.start_authorize(groups, stripe, group_id)
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.get("/stripe/oauth/callback", response_model=CallbackOut)
async def oauth_callback(
    session: SessionDep,
    groups: Annotated[GroupRepo, Depends(get_group_repo)],
    accounts: Annotated[StripeAccountRepo, Depends(get_stripe_account_repo)],
    stripe: Annotated[StripeConnect, Depends(get_stripe_client)],
    state: str | None = Query(None),
    code: str | None = Query(None),
    error: str | None = Query(None),
    error_description: str | None = Query(None),
) -> CallbackOut:
    result = await stripe_service.complete_callback(
        groups,
        accounts,
        stripe,
        state=state,
        code=code,
        error=error,
        error_description=error_description,
    )
    # durable before the 200 is sent; the session dependency exits afterwards
    if session is not None:
        await session.commit()
    account = result.account
    return CallbackOut(
        groupId=result.group.id,
        stripeAccount=StripeAccountOut(
            id=account.id,
            stripeUserId=account.stripe_user_id,
            stripePublishableKey=account.stripe_publishable_key,
            tokenType=account.token_type,
            scope=account.scope,
        ),
    )
