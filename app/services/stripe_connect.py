"""Stripe Connect OAuth client.

Builds the authorize URL the browser is sent to and performs the
server-to-server code-for-token exchange against ``/oauth/token``.
"""

from __future__ import annotations

import logging
import time
from typing import Protocol
from urllib.parse import urlencode

import httpx

from app.core.config import StripeSettings
from app.core.metrics import STRIPE_TOKEN_EXCHANGE_DURATION
from app.models.stripe_account import StripeTokenGrant

logger = logging.getLogger(__name__)

_GRANT_FIELDS = (
    "access_token",
    "refresh_token",
    "token_type",
    "stripe_publishable_key",
    "stripe_user_id",
    "scope",
)


class StripeOAuthError(Exception):
    """The token exchange did not produce a usable grant."""


class StripeConnect(Protocol):
    def build_authorize_url(self, state: str) -> str: ...
    async def exchange_code(self, code: str) -> StripeTokenGrant: ...


class StripeConnectClient:
    """Talks to ``connect.stripe.com`` with httpx.

    ``transport`` lets tests plug in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: StripeSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def build_authorize_url(self, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self._settings.client_id,
            "scope": self._settings.scope,
            "state": state,
        }
        if self._settings.redirect_uri:
            params["redirect_uri"] = self._settings.redirect_uri
        return f"{self._settings.authorize_url}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> StripeTokenGrant:
        """Exchange an authorization code for a Connect account grant.

        Raises StripeOAuthError on transport errors, non-200 replies,
        non-JSON bodies and replies missing any grant field.
        """
        payload = {
            "grant_type": "authorization_code",
            "client_id": self._settings.client_id,
            "client_secret": self._settings.secret,
            "code": code,
        }

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_sec, transport=self._transport
            ) as client:
                response = await client.post(self._settings.token_url, data=payload)
        except httpx.HTTPError as e:
            raise StripeOAuthError(f"token request failed: {type(e).__name__}") from e
        finally:
            STRIPE_TOKEN_EXCHANGE_DURATION.observe(time.monotonic() - start)

        if response.status_code != httpx.codes.OK:
            # Stripe error bodies carry error/error_description, never tokens.
            raise StripeOAuthError(
                f"token endpoint returned {response.status_code}: {_error_summary(response)}"
            )

        try:
            body = response.json()
        except ValueError:
            raise StripeOAuthError("token endpoint returned a non-JSON body") from None
        if not isinstance(body, dict):
            raise StripeOAuthError("token endpoint returned an unexpected body")

        missing = [f for f in _GRANT_FIELDS if not isinstance(body.get(f), str) or not body[f]]
        if missing:
            raise StripeOAuthError(f"token reply missing fields: {', '.join(missing)}")

        grant = StripeTokenGrant(**{f: body[f] for f in _GRANT_FIELDS})
        logger.debug("Token exchange succeeded stripe_user_id=%s", grant.stripe_user_id)
        return grant


def _error_summary(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return "<non-json body>"
    if not isinstance(body, dict):
        return "<unexpected body>"
    return str(body.get("error_description") or body.get("error") or "<no error field>")
