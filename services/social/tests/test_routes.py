import uuid

import pytest

from app.accounts.constants import AccountRole
from app.config import Settings
from app.database import get_session_factory
from app.main import create_app

API = "/api/v1"


async def _register(client, auth, username: str, *, is_private: bool = True) -> uuid.UUID:
    account_id = uuid.uuid4()
    resp = await client.post(
        f"{API}/accounts",
        json={"username": username, "name": username.title(), "is_private": is_private},
        headers=auth(account_id),
    )
    assert resp.status_code == 201, resp.text
    return account_id


@pytest.mark.asyncio
async def test_health(async_client) -> None:
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "social"}


@pytest.mark.asyncio
async def test_requires_token(async_client) -> None:
    resp = await async_client.get(f"{API}/accounts/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_register_and_profile(async_client, auth) -> None:
    me = await _register(async_client, auth, "alice")

    resp = await async_client.get(f"{API}/accounts/me", headers=auth(me))
    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "alice"
    assert body["is_private"] is True
    assert body["role"] == "user"

    resp = await async_client.patch(
        f"{API}/accounts/me", json={"bio": "hello", "is_private": False}, headers=auth(me)
    )
    assert resp.status_code == 200
    assert resp.json()["bio"] == "hello"
    assert resp.json()["is_private"] is False

    resp = await async_client.post(
        f"{API}/accounts", json={"username": "alice", "name": "Again"}, headers=auth(uuid.uuid4())
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "username_taken"


@pytest.mark.asyncio
async def test_private_follow_flow(app, async_client, auth) -> None:
    events = []

    async def record(event) -> None:
        events.append(event.event_type)

    app.state.event_publisher.subscribe(record)

    alice = await _register(async_client, auth, "alice")
    bob = await _register(async_client, auth, "bob")

    resp = await async_client.post(f"{API}/users/{alice}/follow", headers=auth(bob))
    assert resp.status_code == 200
    assert resp.json()["state"] == "pending"

    resp = await async_client.get(f"{API}/users/me/requests", headers=auth(alice))
    assert resp.json()["total"] == 1
    assert resp.json()["items"][0]["account"]["username"] == "bob"

    resp = await async_client.get(f"{API}/users/{alice}/posts", headers=auth(bob))
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "posts_hidden"

    resp = await async_client.post(f"{API}/users/requests/{bob}/accept", headers=auth(alice))
    assert resp.status_code == 200

    resp = await async_client.get(f"{API}/users/{alice}/relationship", headers=auth(bob))
    assert resp.json() == {"account_id": str(alice), "following": "approved", "followed_by": "none"}

    resp = await async_client.get(f"{API}/users/{alice}/posts", headers=auth(bob))
    assert resp.status_code == 200

    resp = await async_client.get(f"{API}/accounts/me", headers=auth(alice))
    assert resp.json()["follower_count"] == 1

    resp = await async_client.post(f"{API}/users/{alice}/follow", headers=auth(bob))
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "already_related"

    resp = await async_client.delete(f"{API}/users/{alice}/follow", headers=auth(bob))
    assert resp.status_code == 204

    assert events == ["follow_requested", "follow_accepted"]


@pytest.mark.asyncio
async def test_follow_cap_error_envelope(async_client, auth) -> None:
    # test_settings caps follows at 3
    me = await _register(async_client, auth, "mia")
    targets = [
        await _register(async_client, auth, f"pub{i}", is_private=False) for i in range(4)
    ]
    for target in targets[:3]:
        resp = await async_client.post(f"{API}/users/{target}/follow", headers=auth(me))
        assert resp.json()["state"] == "approved"

    resp = await async_client.post(
        f"{API}/users/{targets[3]}/follow",
        headers={**auth(me), "X-Request-ID": "req-42"},
    )
    assert resp.status_code == 409
    assert resp.json() == {
        "error": {"code": "follow_cap_reached", "message": "Follow limit reached (3)."},
        "request_id": "req-42",
    }

    resp = await async_client.get(f"{API}/users/me/following", headers=auth(me))
    assert resp.json()["total"] == 3


@pytest.mark.asyncio
async def test_self_follow_is_422(async_client, auth) -> None:
    me = await _register(async_client, auth, "mia")
    resp = await async_client.post(f"{API}/users/{me}/follow", headers=auth(me))
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "self_follow"


@pytest.mark.asyncio
async def test_report_and_admin_review(app, async_client, auth, make_account) -> None:
    events = []

    async def record(event) -> None:
        events.append(event.event_type)

    app.state.event_publisher.subscribe(record)

    owner = await _register(async_client, auth, "owner", is_private=False)
    readers = [await _register(async_client, auth, f"reader{i}") for i in range(2)]
    admin = await make_account("moderator", role=AccountRole.ADMIN)

    resp = await async_client.post(f"{API}/posts", json={"content": "spam"}, headers=auth(owner))
    assert resp.status_code == 201
    post_id = resp.json()["post_id"]

    # test_settings sets the priority threshold to 2
    resp = await async_client.post(
        f"{API}/posts/{post_id}/report", json={"reason": "Hateful"}, headers=auth(readers[0])
    )
    assert resp.status_code == 201
    assert resp.json()["is_priority_review"] is False
    resp = await async_client.post(
        f"{API}/posts/{post_id}/report", json={"reason": "Hateful"}, headers=auth(readers[1])
    )
    assert resp.json()["report_count"] == 2
    assert resp.json()["is_priority_review"] is True

    resp = await async_client.post(
        f"{API}/posts/{post_id}/report", json={"reason": "Hateful"}, headers=auth(readers[1])
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "duplicate_report"

    resp = await async_client.post(
        f"{API}/posts/{post_id}/report", json={"reason": "Boring"}, headers=auth(readers[0])
    )
    assert resp.status_code == 422

    resp = await async_client.get(f"{API}/admin/moderation/posts", headers=auth(owner))
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "admin_required"

    resp = await async_client.get(f"{API}/admin/moderation/posts", headers=auth(admin.id))
    assert resp.status_code == 200
    queue = resp.json()
    assert queue["priority_count"] == 1
    assert queue["items"][0]["post_id"] == post_id
    assert queue["items"][0]["pending_reports"] == 2

    resp = await async_client.post(
        f"{API}/admin/moderation/posts/{post_id}/review",
        json={"action": "remove"},
        headers=auth(admin.id),
    )
    assert resp.status_code == 200
    assert resp.json()["is_removed"] is True
    assert resp.json()["is_priority_review"] is False

    resp = await async_client.get(
        f"{API}/admin/moderation/posts/{post_id}/reports", headers=auth(admin.id)
    )
    assert {r["status"] for r in resp.json()["items"]} == {"removed"}

    assert events == ["post_flagged", "post_reviewed"]


@pytest.mark.asyncio
async def test_admin_account_management(async_client, auth, make_account) -> None:
    admin = await make_account("root", role=AccountRole.ADMIN)
    user = await _register(async_client, auth, "user")

    resp = await async_client.post(f"{API}/admin/accounts/promote/user", headers=auth(admin.id))
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"

    resp = await async_client.delete(f"{API}/admin/accounts/{user}", headers=auth(user))
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "cannot_delete_self"

    resp = await async_client.delete(f"{API}/admin/accounts/{user}", headers=auth(admin.id))
    assert resp.status_code == 200

    resp = await async_client.get(f"{API}/accounts/{user}", headers=auth(admin.id))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "account_not_found"


@pytest.mark.asyncio
async def test_post_without_account_is_404(async_client, auth) -> None:
    resp = await async_client.post(
        f"{API}/posts", json={"content": "hello"}, headers=auth(uuid.uuid4())
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "account_not_found"


@pytest.mark.asyncio
async def test_lifespan_uses_injected_database_url(tmp_path) -> None:
    db_file = tmp_path / "lifespan.db"
    application = create_app(Settings(social_database_url=f"sqlite+aiosqlite:///{db_file}"))
    async with application.router.lifespan_context(application):
        engine = get_session_factory().kw["bind"]
        assert engine.url.database == str(db_file)
        await engine.dispose()
