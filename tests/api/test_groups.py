from __future__ import annotations

import asyncio

from fastapi.testclient import TestClient

from app.api import dependencies
from tests.conftest import auth, create_test_group, mint_token


def _group_body(is_host: bool, role: str = "admin") -> dict:
    return {
        "group": {"name": "Open Source Collective", "description": "hosts", "isHost": is_host},
        "role": role,
    }


def test_create_group_requires_login(client: TestClient) -> None:
    resp = client.post("/groups", json=_group_body(True))
    assert resp.status_code == 401


def test_create_host_group(client: TestClient, token: str) -> None:
    resp = client.post("/groups", json=_group_body(True), headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["isHost"] is True
    assert body["name"] == "Open Source Collective"
    assert body["stripeAccountId"] is None
    assert isinstance(body["id"], int)


def test_create_group_defaults_to_not_host(client: TestClient, token: str) -> None:
    resp = client.post(
        "/groups", json={"group": {"name": "Plain"}}, headers=auth(token)
    )
    assert resp.status_code == 200
    assert resp.json()["isHost"] is False


def test_creator_becomes_member_with_role(client: TestClient) -> None:
    tok = mint_token(username="alice")
    resp = client.post("/groups", json=_group_body(False, "writer"), headers=auth(tok))
    group_id = resp.json()["id"]

    membership = asyncio.run(dependencies.membership_repo.get(group_id, "alice"))
    assert membership is not None
    assert membership.role == "writer"


def test_create_group_rejects_unknown_role(client: TestClient, token: str) -> None:
    resp = client.post("/groups", json=_group_body(True, "owner"), headers=auth(token))
    assert resp.status_code == 400
    assert resp.json()["error"]["type"] == "bad_request"


def test_create_group_rejects_missing_name(client: TestClient, token: str) -> None:
    resp = client.post("/groups", json={"group": {}}, headers=auth(token))
    assert resp.status_code == 400
    assert "group.name" in resp.json()["error"]["message"]


def test_get_group(client: TestClient, token: str) -> None:
    group = create_test_group("Readable", is_host=True)
    resp = client.get(f"/groups/{group.id}", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json()["name"] == "Readable"


def test_get_unknown_group(client: TestClient, token: str) -> None:
    resp = client.get("/groups/42", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Group does not exist"
