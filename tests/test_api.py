from datetime import timedelta

from sqlalchemy import func, select

from harmony.core.errors import PersistenceFailure
from harmony.models.request import WorkflowRequest
from harmony.workflow.engine import WorkflowEngine
from harmony.workflow.kinds import OperationKind


async def test_friend_request_flow(client, users, auth_headers):
    created = await client.post(
        "/requests/friend",
        json={"targetEmail": "bob@example.com"},
        headers=auth_headers(users["alice"]),
    )
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["success"] is True
    uid = body["uid"]

    incoming = await client.get("/requests/friend/incoming", headers=auth_headers(users["bob"]))
    assert incoming.status_code == 200, incoming.text
    data = incoming.json()["data"]
    assert len(data) == 1
    assert data[0]["uid"] == uid
    assert data[0]["username"] == "Alice"
    assert data[0]["email"] == "alice@example.com"
    assert "timeCreated" in data[0]
    assert "profileUrl" in data[0]

    resolved = await client.post(
        "/requests/friend/resolve",
        json={"requestUid": uid, "accepted": True},
        headers=auth_headers(users["bob"]),
    )
    assert resolved.status_code == 200, resolved.text
    assert resolved.json() == {"success": True, "status": "accepted"}

    friends = await client.get("/friends", headers=auth_headers(users["alice"]))
    assert friends.status_code == 200
    assert [friend["email"] for friend in friends.json()["received"]] == ["bob@example.com"]

    again = await client.post(
        "/requests/friend/resolve",
        json={"requestUid": uid, "accepted": True},
        headers=auth_headers(users["bob"]),
    )
    assert again.status_code == 409
    assert again.json()["success"] is False
    assert again.json()["reason"] == "ALREADY_RESOLVED"


async def test_friend_request_unknown_target(client, users, session_factory, auth_headers):
    response = await client.post(
        "/requests/friend",
        json={"targetEmail": "nobody@example.com"},
        headers=auth_headers(users["alice"]),
    )
    assert response.status_code == 404
    assert response.json()["success"] is False
    assert response.json()["reason"] == "TARGET_NOT_FOUND"

    async with session_factory() as session:
        total = await session.execute(select(func.count()).select_from(WorkflowRequest))
        assert total.scalar_one() == 0


async def test_resolve_unknown_request(client, users, auth_headers):
    response = await client.post(
        "/requests/team/resolve",
        json={"requestUid": "missing", "accepted": False},
        headers=auth_headers(users["bob"]),
    )
    assert response.status_code == 404
    assert response.json()["reason"] == "NOT_FOUND"


async def test_requests_need_a_token(client, users):
    response = await client.get("/requests/friend/incoming")
    assert response.status_code in (401, 403)
    assert response.json()["success"] is False


async def test_invalid_token_is_rejected(client, users):
    response = await client.get(
        "/requests/friend/incoming", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"


async def test_validation_error_shape(client, users, auth_headers):
    response = await client.post(
        "/requests/friend",
        json={"targetEmail": "not-an-email"},
        headers=auth_headers(users["alice"]),
    )
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_team_invite_flow(client, users, auth_headers):
    created_team = await client.post(
        "/teams", json={"teamName": "Eng Team"}, headers=auth_headers(users["alice"])
    )
    assert created_team.status_code == 201, created_team.text
    team = created_team.json()["team"]
    assert team["owned"] is True
    assert team["teamCallLink"] == f"eng-team/{team['uid']}"

    invite_body = {"targetEmail": "bob@example.com", "teamUid": team["uid"], "teamName": "Eng Team"}
    created = await client.post("/requests/team", json=invite_body, headers=auth_headers(users["alice"]))
    assert created.status_code == 201, created.text
    uid = created.json()["uid"]

    duplicate = await client.post("/requests/team", json=invite_body, headers=auth_headers(users["alice"]))
    assert duplicate.status_code == 409
    assert duplicate.json()["reason"] == "ALREADY_INVITED"

    incoming = await client.get("/requests/team/incoming", headers=auth_headers(users["bob"]))
    data = incoming.json()["data"]
    assert [item["uid"] for item in data] == [uid]
    assert data[0]["team"] == {"teamUid": team["uid"], "teamName": "Eng Team"}

    resolved = await client.post(
        "/requests/team/resolve",
        json={"requestUid": uid, "accepted": True},
        headers=auth_headers(users["bob"]),
    )
    assert resolved.status_code == 200, resolved.text

    member_again = await client.post("/requests/team", json=invite_body, headers=auth_headers(users["alice"]))
    assert member_again.status_code == 409
    assert member_again.json()["reason"] == "ALREADY_MEMBER"

    bob_teams = await client.get("/teams", headers=auth_headers(users["bob"]))
    assert [joined["uid"] for joined in bob_teams.json()["joined"]] == [team["uid"]]
    assert bob_teams.json()["owned"] == []

    members = await client.get(f"/teams/{team['uid']}/members", headers=auth_headers(users["bob"]))
    assert members.status_code == 200
    assert {(m["email"], m["owner"]) for m in members.json()["data"]} == {
        ("bob@example.com", False),
        ("alice@example.com", True),
    }


async def test_members_hidden_from_outsiders(client, users, team, auth_headers):
    response = await client.get(f"/teams/{team['uid']}/members", headers=auth_headers(users["carol"]))
    assert response.status_code == 404
    assert response.json()["reason"] == "TEAM_NOT_FOUND"


async def test_remove_friend(client, users, session_factory, auth_headers):
    async with session_factory() as session:
        engine = WorkflowEngine(session)
        uid = await engine.create_friend_request(users["alice"], "bob@example.com")
        await engine.resolve(users["bob"], uid, True, OperationKind.ADD_FRIEND)

    removed = await client.delete("/friends/alice@example.com", headers=auth_headers(users["bob"]))
    assert removed.status_code == 200
    assert removed.json() == {"success": True}

    friends = await client.get("/friends", headers=auth_headers(users["bob"]))
    assert friends.json()["received"] == []
    assert friends.json()["sent"] == []


async def test_internal_faults_are_generic(client, users, auth_headers, monkeypatch):
    async def broken(self, *args, **kwargs):
        raise PersistenceFailure(details={"operation": "RequestStore.insert", "secret": "dsn"})

    monkeypatch.setattr(WorkflowEngine, "create_friend_request", broken)
    response = await client.post(
        "/requests/friend",
        json={"targetEmail": "bob@example.com"},
        headers=auth_headers(users["alice"]),
    )
    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error"},
    }


async def test_expired_token_is_rejected(client, users, auth_headers):
    response = await client.get(
        "/requests/friend/incoming",
        headers=auth_headers(users["bob"], expires_in=timedelta(minutes=-1)),
    )
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTHENTICATION_FAILED"


async def test_remove_non_friend_reports_failure(client, users, auth_headers):
    removed = await client.delete("/friends/carol@example.com", headers=auth_headers(users["bob"]))
    assert removed.status_code == 200
    assert removed.json() == {"success": False}


async def test_responses_carry_request_id(client, users, auth_headers):
    response = await client.get("/friends", headers=auth_headers(users["alice"]))
    assert response.headers["x-request-id"]
