"""StripeConnectClient against an httpx.MockTransport."""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from app.core.config import StripeSettings
from app.services.stripe_connect import StripeConnectClient, StripeOAuthError
from tests.conftest import STRIPE_RESPONSE, TEST_STRIPE_SETTINGS


def _client(handler) -> StripeConnectClient:
    return StripeConnectClient(
        TEST_STRIPE_SETTINGS, transport=httpx.MockTransport(handler)
    )


def test_authorize_url_includes_state_and_client() -> None:
    url = StripeConnectClient(TEST_STRIPE_SETTINGS).build_authorize_url(state="17")
    parsed = urlparse(url)
    params = parse_qs(parsed.query)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == (
        "https://connect.stripe.com/oauth/authorize"
    )
    assert params == {
        "response_type": ["code"],
        "client_id": ["ca_test_123"],
        "scope": ["read_write"],
        "state": ["17"],
    }


def test_authorize_url_includes_redirect_uri_when_configured() -> None:
    settings = StripeSettings(
        client_id="ca_x",
        secret="sk_x",
        redirect_uri="https://example.com/stripe/oauth/callback",
    )
    url = StripeConnectClient(settings).build_authorize_url(state="1")
    params = parse_qs(urlparse(url).query)
    assert params["redirect_uri"] == ["https://example.com/stripe/oauth/callback"]


def test_exchange_code_posts_grant_and_parses_reply() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=STRIPE_RESPONSE)

    grant = asyncio.run(_client(handler).exchange_code("abc"))

    assert grant.access_token == "sk_test_123"
    assert grant.refresh_token == "rt_123"
    assert grant.token_type == "bearer"
    assert grant.stripe_publishable_key == "pk_test_123"
    assert grant.stripe_user_id == "acct_123"
    assert grant.scope == "read_write"

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://connect.stripe.com/oauth/token"
    assert parse_qs(request.content.decode()) == {
        "grant_type": ["authorization_code"],
        "client_id": ["ca_test_123"],
        "client_secret": ["sk_test_secret"],
        "code": ["abc"],
    }


def test_grant_repr_hides_tokens() -> None:
    grant = asyncio.run(
        _client(lambda r: httpx.Response(200, json=STRIPE_RESPONSE)).exchange_code("abc")
    )
    assert "sk_test_123" not in repr(grant)
    assert "rt_123" not in repr(grant)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(
            400,
            json={"error": "invalid_grant", "error_description": "Authorization code expired"},
        ),
        httpx.Response(500, text="upstream exploded"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, json={k: v for k, v in STRIPE_RESPONSE.items() if k != "scope"}),
        httpx.Response(200, json={**STRIPE_RESPONSE, "access_token": ""}),
    ],
    ids=["invalid-grant", "server-error", "non-json", "non-object", "missing-field", "empty-field"],
)
def test_exchange_code_rejects_bad_replies(response: httpx.Response) -> None:
    with pytest.raises(StripeOAuthError):
        asyncio.run(_client(lambda r: response).exchange_code("abc"))


def test_exchange_code_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(StripeOAuthError, match="ConnectError"):
        asyncio.run(_client(handler).exchange_code("abc"))


def test_error_message_uses_stripe_description() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400, json={"error": "invalid_grant", "error_description": "Code already used"}
        )

    with pytest.raises(StripeOAuthError, match="400: Code already used"):
        asyncio.run(_client(handler).exchange_code("abc"))
