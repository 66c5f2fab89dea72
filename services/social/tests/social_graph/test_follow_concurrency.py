import asyncio

import pytest

from app.exceptions import AlreadyRelated, FollowCapReached
from app.social_graph import service as svc


async def _follow_in_own_session(session_factory, follower_id, target_id, limit):
    async with session_factory() as session:
        try:
            await svc.request_follow(session, follower_id, target_id, limit=limit)
            return "ok"
        except FollowCapReached:
            return "cap"
        except AlreadyRelated:
            return "duplicate"


@pytest.mark.asyncio
async def test_concurrent_follows_never_exceed_cap(
    session_factory, make_account, reload
) -> None:
    limit = 3
    a = await make_account("alice")
    targets = [await make_account(f"pub{i}", is_private=False) for i in range(8)]

    results = await asyncio.gather(
        *(_follow_in_own_session(session_factory, a.id, t.id, limit) for t in targets)
    )

    assert results.count("ok") == limit
    assert results.count("cap") == len(targets) - limit
    assert (await reload(a.id)).following_count == limit
    gained = [(await reload(t.id)).follower_count for t in targets]
    assert sum(gained) == limit


@pytest.mark.asyncio
async def test_concurrent_duplicate_requests_create_one_edge(
    session_factory, make_account, reload
) -> None:
    a = await make_account("alice")
    b = await make_account("bob", is_private=False)

    results = await asyncio.gather(
        *(_follow_in_own_session(session_factory, a.id, b.id, 150) for _ in range(5))
    )

    assert results.count("ok") == 1
    assert results.count("duplicate") == 4
    assert (await reload(a.id)).following_count == 1
    assert (await reload(b.id)).follower_count == 1
