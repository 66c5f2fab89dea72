import uuid

import pytest

from app.database import atomic
from app.exceptions import (
    AlreadyRelated,
    ConflictError,
    FollowCapReached,
    NotAFollower,
    NotFollowing,
    RequestNotFound,
    SelfFollow,
    TargetNotFound,
    ValidationError,
)
from app.social_graph import service as svc
from app.social_graph import store
from app.social_graph.constants import FOLLOW_LIMIT, Direction, EdgeState


async def _assert_counters_match_edges(db_session, reload, *accounts) -> None:
    for account in accounts:
        fresh = await reload(account.id)
        async with atomic(db_session):
            _, followers = await store.list_approved(db_session, account.id, Direction.FOLLOWERS)
            _, following = await store.list_approved(db_session, account.id, Direction.FOLLOWING)
        assert fresh.follower_count == followers
        assert fresh.following_count == following


# ── request_follow ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_public_follow_is_immediate(db_session, make_account, reload) -> None:
    a = await make_account("alice")
    b = await make_account("bob", is_private=False)
    edge = await svc.request_follow(db_session, a.id, b.id)
    assert edge.is_pending is False
    assert (await reload(a.id)).following_count == 1
    assert (await reload(b.id)).follower_count == 1
    await _assert_counters_match_edges(db_session, reload, a, b)


@pytest.mark.asyncio
async def test_private_follow_is_pending_without_counter_changes(
    db_session, make_account, reload
) -> None:
    a = await make_account("alice")
    b = await make_account("bob")  # private by default
    edge = await svc.request_follow(db_session, a.id, b.id)
    assert edge.is_pending is True
    assert (await reload(a.id)).following_count == 0
    assert (await reload(b.id)).follower_count == 0


@pytest.mark.asyncio
async def test_self_follow_rejected(db_session, make_account) -> None:
    a = await make_account("alice")
    with pytest.raises(SelfFollow) as exc_info:
        await svc.request_follow(db_session, a.id, a.id)
    assert isinstance(exc_info.value, ValidationError)


@pytest.mark.asyncio
async def test_follow_missing_target(db_session, make_account) -> None:
    a = await make_account("alice")
    with pytest.raises(TargetNotFound):
        await svc.request_follow(db_session, a.id, uuid.uuid4())


@pytest.mark.asyncio
async def test_second_request_is_conflict_and_changes_nothing(
    db_session, make_account, reload
) -> None:
    a = await make_account("alice")
    b = await make_account("bob", is_private=False)
    p = await make_account("pat")
    await svc.request_follow(db_session, a.id, b.id)
    await svc.request_follow(db_session, a.id, p.id)

    with pytest.raises(AlreadyRelated) as exc_info:
        await svc.request_follow(db_session, a.id, b.id)
    assert isinstance(exc_info.value, ConflictError)
    with pytest.raises(AlreadyRelated):
        await svc.request_follow(db_session, a.id, p.id)

    assert (await reload(a.id)).following_count == 1
    assert (await reload(b.id)).follower_count == 1
    rel = await svc.get_relationship(db_session, a.id, p.id)
    assert rel.following is EdgeState.PENDING


# ── Cap ───────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_follow_cap_stops_the_151st(db_session, make_account, reload) -> None:
    a = await make_account("alice")
    targets = [await make_account(f"pub{i}", is_private=False) for i in range(FOLLOW_LIMIT + 1)]
    for target in targets[:FOLLOW_LIMIT]:
        await svc.request_follow(db_session, a.id, target.id)

    with pytest.raises(FollowCapReached) as exc_info:
        await svc.request_follow(db_session, a.id, targets[-1].id)
    assert exc_info.value.message == "Follow limit reached (150)."

    assert (await reload(a.id)).following_count == FOLLOW_LIMIT
    assert (await reload(targets[-1].id)).follower_count == 0
    rel = await svc.get_relationship(db_session, a.id, targets[-1].id)
    assert rel.following is EdgeState.NONE


@pytest.mark.asyncio
async def test_cap_also_blocks_new_private_requests(db_session, make_account) -> None:
    a = await make_account("alice")
    pub = await make_account("pub", is_private=False)
    priv = await make_account("priv")
    await svc.request_follow(db_session, a.id, pub.id, limit=1)
    with pytest.raises(FollowCapReached):
        await svc.request_follow(db_session, a.id, priv.id, limit=1)


@pytest.mark.asyncio
async def test_accept_at_cap_keeps_request_pending(db_session, make_account, reload) -> None:
    a = await make_account("alice")
    priv = await make_account("priv")
    pub = await make_account("pub", is_private=False)
    await svc.request_follow(db_session, a.id, priv.id, limit=1)
    await svc.request_follow(db_session, a.id, pub.id, limit=1)

    with pytest.raises(FollowCapReached):
        await svc.accept_follow(db_session, a.id, priv.id, limit=1)

    rel = await svc.get_relationship(db_session, a.id, priv.id)
    assert rel.following is EdgeState.PENDING
    assert (await reload(a.id)).following_count == 1
    assert (await reload(priv.id)).follower_count == 0


# ── Unfollow / accept / reject ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_public_follow_then_unfollow_restores_counters(
    db_session, make_account, reload
) -> None:
    a = await make_account("alice")
    b = await make_account("bob", is_private=False)
    await svc.request_follow(db_session, a.id, b.id)
    await svc.unfollow(db_session, a.id, b.id)
    assert (await reload(a.id)).following_count == 0
    assert (await reload(b.id)).follower_count == 0
    with pytest.raises(NotFollowing):
        await svc.unfollow(db_session, a.id, b.id)


@pytest.mark.asyncio
async def test_unfollow_does_not_touch_pending_request(db_session, make_account) -> None:
    a = await make_account("alice")
    b = await make_account("bob")
    await svc.request_follow(db_session, a.id, b.id)
    with pytest.raises(NotFollowing):
        await svc.unfollow(db_session, a.id, b.id)
    rel = await svc.get_relationship(db_session, a.id, b.id)
    assert rel.following is EdgeState.PENDING


@pytest.mark.asyncio
async def test_accept_gives_same_deltas_as_public_follow(
    db_session, make_account, reload
) -> None:
    a = await make_account("alice")
    b = await make_account("bob")
    await svc.request_follow(db_session, a.id, b.id)
    await svc.accept_follow(db_session, a.id, b.id)
    assert (await reload(a.id)).following_count == 1
    assert (await reload(b.id)).follower_count == 1
    rel = await svc.get_relationship(db_session, b.id, a.id)
    assert rel.followed_by is EdgeState.APPROVED
    assert rel.following is EdgeState.NONE

    # A second accept finds no pending request and changes nothing
    with pytest.raises(RequestNotFound):
        await svc.accept_follow(db_session, a.id, b.id)
    assert (await reload(b.id)).follower_count == 1


@pytest.mark.asyncio
async def test_reject_removes_request_with_zero_deltas(db_session, make_account, reload) -> None:
    a = await make_account("alice")
    b = await make_account("bob")
    await svc.request_follow(db_session, a.id, b.id)
    await svc.reject_follow(db_session, a.id, b.id)
    assert (await reload(a.id)).following_count == 0
    assert (await reload(b.id)).follower_count == 0
    rel = await svc.get_relationship(db_session, a.id, b.id)
    assert rel.following is EdgeState.NONE
    with pytest.raises(RequestNotFound):
        await svc.reject_follow(db_session, a.id, b.id)


@pytest.mark.asyncio
async def test_reject_cannot_remove_approved_follow(db_session, make_account, reload) -> None:
    a = await make_account("alice")
    b = await make_account("bob", is_private=False)
    await svc.request_follow(db_session, a.id, b.id)
    with pytest.raises(RequestNotFound):
        await svc.reject_follow(db_session, a.id, b.id)
    assert (await reload(b.id)).follower_count == 1


@pytest.mark.asyncio
async def test_cancel_request(db_session, make_account) -> None:
    a = await make_account("alice")
    b = await make_account("bob")
    await svc.request_follow(db_session, a.id, b.id)
    await svc.cancel_follow_request(db_session, a.id, b.id)
    rows, total = await svc.get_incoming_requests(db_session, b.id, page=1, size=20)
    assert total == 0
    assert rows == []
    # The pair can start over
    edge = await svc.request_follow(db_session, a.id, b.id)
    assert edge.is_pending is True


@pytest.mark.asyncio
async def test_remove_follower(db_session, make_account, reload) -> None:
    owner = await make_account("owner", is_private=False)
    fan = await make_account("fan")
    await svc.request_follow(db_session, fan.id, owner.id)
    await svc.remove_follower(db_session, owner.id, fan.id)
    assert (await reload(owner.id)).follower_count == 0
    assert (await reload(fan.id)).following_count == 0
    with pytest.raises(NotAFollower):
        await svc.remove_follower(db_session, owner.id, fan.id)


@pytest.mark.asyncio
async def test_counters_track_edges_through_mixed_operations(
    db_session, make_account, reload
) -> None:
    a = await make_account("alice", is_private=False)
    b = await make_account("bob")
    c = await make_account("carol", is_private=False)

    await svc.request_follow(db_session, a.id, b.id)
    await svc.request_follow(db_session, a.id, c.id)
    await svc.request_follow(db_session, b.id, a.id)
    await svc.request_follow(db_session, c.id, b.id)
    await svc.accept_follow(db_session, a.id, b.id)
    await svc.reject_follow(db_session, c.id, b.id)
    await svc.request_follow(db_session, b.id, c.id)
    await svc.unfollow(db_session, a.id, c.id)
    await svc.remove_follower(db_session, a.id, b.id)

    await _assert_counters_match_edges(db_session, reload, a, b, c)


@pytest.mark.asyncio
async def test_follow_lists(db_session, make_account) -> None:
    owner = await make_account("owner")
    fans = [await make_account(f"fan{i}") for i in range(3)]
    for fan in fans:
        await svc.request_follow(db_session, fan.id, owner.id)
    await svc.accept_follow(db_session, fans[0].id, owner.id)

    followers, total = await svc.get_followers(db_session, owner.id, page=1, size=20)
    assert total == 1
    assert followers[0][1].username == "fan0"

    requests, total = await svc.get_incoming_requests(db_session, owner.id, page=1, size=1)
    assert total == 2
    assert len(requests) == 1

    outgoing, total = await svc.get_outgoing_requests(db_session, fans[1].id, page=1, size=20)
    assert total == 1
    assert outgoing[0][1].id == owner.id

    following, total = await svc.get_following(db_session, fans[0].id, page=1, size=20)
    assert total == 1
