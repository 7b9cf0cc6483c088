"""Callback and group routes wired to the SQL repositories (aiosqlite)."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.db import tables  # noqa: F401
from app.db.engine import Base, get_optional_session, make_session_factory
from app.main import app
from app.models.group import Group
from app.models.stripe_account import StripeAccount
from app.repos.sql_group_repo import SqlGroupRepo
from app.repos.sql_stripe_account_repo import SqlStripeAccountRepo
from tests.conftest import auth

pytest.importorskip("aiosqlite")


class _FailingCommitSession(AsyncSession):
    async def commit(self) -> None:
        raise RuntimeError("commit failed")


@pytest.fixture
def engine() -> AsyncEngine:
    return create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)


def _use_sessions(sessions: async_sessionmaker[AsyncSession]) -> None:
    # No commit on exit: whatever is durable was committed by the handler.
    async def override() -> AsyncIterator[AsyncSession]:
        async with sessions() as session:
            yield session

    app.dependency_overrides[get_optional_session] = override


@pytest.fixture
def sql_client(engine: AsyncEngine) -> Iterator[TestClient]:
    _use_sessions(make_session_factory(engine))
    with TestClient(app, follow_redirects=False) as client:
        client.portal.call(_create_schema, engine)
        yield client
        client.portal.call(engine.dispose)


async def _create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _create_host(engine: AsyncEngine) -> Group:
    async with make_session_factory(engine)() as session:
        group = await SqlGroupRepo(session).create(name="Host", is_host=True)
        await session.commit()
    return group


async def _load(
    engine: AsyncEngine, group_id: int
) -> tuple[Group | None, list[StripeAccount]]:
    async with make_session_factory(engine)() as session:
        group = await SqlGroupRepo(session).get_by_id(group_id)
        accounts = await SqlStripeAccountRepo(session).list_all()
    return group, accounts


def test_callback_commits_account_and_link_before_responding(
    sql_client: TestClient, engine: AsyncEngine, fake_stripe
) -> None:
    host = sql_client.portal.call(_create_host, engine)

    resp = sql_client.get(f"/stripe/oauth/callback?state={host.id}&code=abc")
    assert resp.status_code == 200

    group, accounts = sql_client.portal.call(_load, engine, host.id)
    assert len(accounts) == 1
    assert accounts[0].stripe_user_id == "acct_123"
    assert group is not None
    assert group.stripe_account_id == accounts[0].id
    assert resp.json()["stripeAccount"]["id"] == accounts[0].id


def test_failed_commit_is_not_reported_as_success(
    engine: AsyncEngine, fake_stripe
) -> None:
    _use_sessions(
        async_sessionmaker(engine, class_=_FailingCommitSession, expire_on_commit=False)
    )
    with TestClient(app, raise_server_exceptions=False) as client:
        client.portal.call(_create_schema, engine)
        host = client.portal.call(_create_host, engine)

        resp = client.get(f"/stripe/oauth/callback?state={host.id}&code=abc")
        assert resp.status_code == 500
        assert resp.json()["error"]["type"] == "server_error"

        group, accounts = client.portal.call(_load, engine, host.id)
        assert accounts == []
        assert group is not None
        assert group.stripe_account_id is None
        client.portal.call(engine.dispose)


def test_unknown_state_writes_nothing(sql_client: TestClient, fake_stripe) -> None:
    resp = sql_client.get("/stripe/oauth/callback?state=999&code=abc")
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Group does not exist"
    assert fake_stripe.codes == []


def test_create_group_is_committed(
    sql_client: TestClient, engine: AsyncEngine, token: str
) -> None:
    resp = sql_client.post(
        "/groups",
        json={"group": {"name": "Host", "isHost": True}},
        headers=auth(token),
    )
    assert resp.status_code == 200

    group, _ = sql_client.portal.call(_load, engine, resp.json()["id"])
    assert group is not None
    assert group.is_host is True
