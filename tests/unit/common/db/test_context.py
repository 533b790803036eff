import asyncio

import pytest

from common.db.context import (
    get_current_session,
    in_transaction,
    reset_current_session,
    set_current_session,
)


@pytest.mark.parametrize("readonly", [False, True])
def test_no_session_outside_transaction(readonly):
    assert get_current_session(readonly=readonly) is None
    assert not in_transaction(readonly=readonly)


async def test_write_session_is_not_visible_to_readers(test_db):
    token = set_current_session(test_db)
    try:
        assert get_current_session() is test_db
        assert get_current_session(readonly=True) is None
    finally:
        reset_current_session(token)

    assert not in_transaction()


async def test_reset_restores_outer_session(test_db):
    outer = object()
    outer_token = set_current_session(outer, readonly=True)
    inner_token = set_current_session(test_db, readonly=True)

    reset_current_session(inner_token, readonly=True)
    assert get_current_session(readonly=True) is outer

    reset_current_session(outer_token, readonly=True)
    assert get_current_session(readonly=True) is None


async def test_each_task_keeps_its_own_session():
    """Concurrent invoice runs must never see each other's session."""
    sessions = {name: object() for name in ("sub_a", "sub_b", "sub_c")}
    observed = {}

    async def run(name: str, delay: float):
        token = set_current_session(sessions[name])
        await asyncio.sleep(delay)
        observed[name] = get_current_session()
        reset_current_session(token)

    await asyncio.gather(run("sub_a", 0.01), run("sub_b", 0.005), run("sub_c", 0.015))

    assert observed == sessions


async def test_sibling_task_does_not_inherit_session(test_db):
    seen = []

    async def holder():
        token = set_current_session(test_db, readonly=True)
        await asyncio.sleep(0.01)
        reset_current_session(token, readonly=True)

    async def bystander():
        await asyncio.sleep(0.005)
        seen.append(get_current_session(readonly=True))

    await asyncio.gather(holder(), bystander())

    assert seen == [None]


async def test_awaited_helpers_see_callers_session(test_db):
    async def lookup():
        return get_current_session()

    token = set_current_session(test_db)
    try:
        assert await lookup() is test_db
    finally:
        reset_current_session(token)
