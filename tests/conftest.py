from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api import dependencies
from app.core.config import StripeSettings
from app.main import app
from app.models.group import Group, GroupMembership
from app.models.stripe_account import StripeTokenGrant
from app.services import token_service
from app.services.stripe_connect import StripeConnectClient, StripeOAuthError

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_STRIPE_SETTINGS = StripeSettings(client_id="ca_test_123", secret="sk_test_secret")

STRIPE_RESPONSE = {
    "access_token": "sk_test_123",
    "refresh_token": "rt_123",
    "token_type": "bearer",
    "stripe_publishable_key": "pk_test_123",
    "stripe_user_id": "acct_123",
    "scope": "read_write",
}


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Clear in-memory stores between tests."""
    dependencies.group_repo.clear()
    dependencies.membership_repo.clear()
    dependencies.stripe_account_repo.clear()


@pytest.fixture(autouse=True)
def reset_overrides() -> Iterator[None]:
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    # The authorize endpoint redirects off-site; tests inspect the 302.
    return TestClient(app, follow_redirects=False)


def mint_token(username: str = "test-user") -> str:
    return token_service.create_access_token(sub=username)


@pytest.fixture
def token() -> str:
    return mint_token()


def auth(token: str | None) -> dict[str, str]:
    if token is None:
        return {}
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Stripe test double
# ---------------------------------------------------------------------------


class FakeStripeConnect(StripeConnectClient):
    """Real authorize URL building, canned token exchange."""

    def __init__(
        self,
        reply: dict[str, str] | None = None,
        *,
        fail: bool = False,
    ) -> None:
        super().__init__(TEST_STRIPE_SETTINGS)
        self.reply = reply if reply is not None else dict(STRIPE_RESPONSE)
        self.fail = fail
        self.codes: list[str] = []

    async def exchange_code(self, code: str) -> StripeTokenGrant:
        self.codes.append(code)
        if self.fail:
            raise StripeOAuthError("token endpoint returned 400: invalid_grant")
        return StripeTokenGrant(**self.reply)


@pytest.fixture
def fake_stripe() -> FakeStripeConnect:
    fake = FakeStripeConnect()
    app.dependency_overrides[dependencies.get_stripe_client] = lambda: fake
    return fake


# ---------------------------------------------------------------------------
# Group helpers
# ---------------------------------------------------------------------------


async def _create_group(name: str, is_host: bool, owner: str) -> Group:
    group = await dependencies.group_repo.create(name=name, is_host=is_host)
    await dependencies.membership_repo.add(
        GroupMembership(group_id=group.id, user_id=owner, role="admin")
    )
    return group


def create_test_group(
    name: str = "Test Group", *, is_host: bool = False, owner: str = "test-user"
) -> Group:
    """Create and persist a group in the in-memory repo."""
    return asyncio.run(_create_group(name, is_host, owner))
