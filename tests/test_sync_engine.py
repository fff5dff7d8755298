"""
Optimistic sync engine tests.
Remote calls are futures resolved by the test, so the order of settlement is explicit.
"""

import asyncio
import copy

import pytest

from contact_directory.client.errors import MutationInvalidatedError
from contact_directory.client.sync_engine import OptimisticSyncEngine
from contact_directory.core.exceptions import NotFoundError

KEY = ("contact-page-members", "page-1")

ROSTER = [
    {"id": "m1", "order_index": 0, "role": "sales", "reasons": [{"id": "r1", "label": "Invoices"}]},
    {"id": "m2", "order_index": 1, "role": "daily", "reasons": []},
]


def _append(member):
    def apply(roster):
        return roster + [member]
    return apply


def _remove(member_id):
    def apply(roster):
        return [member for member in roster if member["id"] != member_id]
    return apply


class Remote:
    """A pending remote call the test resolves by hand."""

    def __init__(self):
        self.future = asyncio.get_running_loop().create_future()
        self.called = asyncio.Event()

    async def __call__(self):
        self.called.set()
        return await self.future


@pytest.fixture
def engine():
    engine = OptimisticSyncEngine()
    engine.cache.set(KEY, ROSTER)
    return engine


async def _start(engine, apply, remote, **kwargs):
    task = asyncio.ensure_future(engine.mutate(KEY, apply, remote, **kwargs))
    await remote.called.wait()
    return task


@pytest.mark.asyncio
async def test_speculative_state_visible_while_in_flight(engine):
    remote = Remote()
    task = await _start(engine, _remove("m1"), remote)

    assert [member["id"] for member in engine.get(KEY)] == ["m2"]
    assert engine.in_flight(KEY) == 1

    remote.future.set_result(None)
    await task
    assert engine.in_flight(KEY) == 0


@pytest.mark.asyncio
async def test_rollback_restores_exact_snapshot(engine):
    before = copy.deepcopy(engine.get(KEY))
    remote = Remote()
    task = await _start(engine, _remove("m1"), remote)

    remote.future.set_exception(NotFoundError("Member not found"))
    with pytest.raises(NotFoundError):
        await task

    assert engine.get(KEY) == before
    assert repr(engine.get(KEY)) == repr(before)


@pytest.mark.asyncio
async def test_apply_failure_leaves_cache_untouched(engine):
    before = engine.get(KEY)

    def broken(roster):
        raise KeyError("order_index")

    async def never_called():
        raise AssertionError("dispatched")

    with pytest.raises(KeyError):
        await engine.mutate(KEY, broken, never_called)

    assert engine.get(KEY) == before
    assert engine.in_flight(KEY) == 0


@pytest.mark.asyncio
async def test_rollback_of_unloaded_key_removes_it():
    engine = OptimisticSyncEngine()
    remote = Remote()
    task = asyncio.ensure_future(engine.mutate(KEY, lambda roster: [{"id": "x"}], remote))
    await remote.called.wait()

    remote.future.set_exception(NotFoundError("gone"))
    with pytest.raises(NotFoundError):
        await task

    assert not engine.cache.has(KEY)


@pytest.mark.asyncio
async def test_second_mutation_builds_on_first(engine):
    first, second = Remote(), Remote()
    task_a = await _start(engine, _append({"id": "m3", "order_index": 2}), first)
    task_b = await _start(engine, _remove("m1"), second)

    assert [member["id"] for member in engine.get(KEY)] == ["m2", "m3"]

    first.future.set_result(None)
    second.future.set_result(None)
    await asyncio.gather(task_a, task_b)
    assert [member["id"] for member in engine.get(KEY)] == ["m2", "m3"]


@pytest.mark.asyncio
async def test_earlier_failure_invalidates_later_mutation(engine):
    before = engine.get(KEY)
    first, second = Remote(), Remote()
    task_a = await _start(engine, _append({"id": "m3", "order_index": 2}), first)
    task_b = await _start(engine, _remove("m1"), second)

    first.future.set_exception(NotFoundError("Contact not found"))
    with pytest.raises(NotFoundError):
        await task_a
    assert engine.get(KEY) == before

    # The later response must not be applied on top of the rolled-back base
    second.future.set_result({"id": "m1"})
    with pytest.raises(MutationInvalidatedError):
        await task_b
    assert engine.get(KEY) == before


@pytest.mark.asyncio
async def test_invalidated_mutation_refetches_when_idle(engine):
    server_state = [{"id": "m2", "order_index": 0, "role": "daily", "reasons": []}]

    async def fetch():
        return server_state

    engine.register_fetcher(KEY, fetch)
    first, second = Remote(), Remote()
    task_a = await _start(engine, _append({"id": "m3", "order_index": 2}), first)
    task_b = await _start(engine, _remove("m1"), second)

    first.future.set_exception(NotFoundError("Contact not found"))
    with pytest.raises(NotFoundError):
        await task_a

    second.future.set_exception(NotFoundError("Member not found"))
    with pytest.raises(MutationInvalidatedError) as exc_info:
        await task_b

    assert isinstance(exc_info.value.__cause__, NotFoundError)
    assert engine.get(KEY) == server_state


@pytest.mark.asyncio
async def test_later_failure_keeps_earlier_mutation(engine):
    first, second = Remote(), Remote()
    task_a = await _start(engine, _append({"id": "m3", "order_index": 2}), first)
    task_b = await _start(engine, _remove("m1"), second)

    second.future.set_exception(NotFoundError("Member not found"))
    with pytest.raises(NotFoundError):
        await task_b
    assert [member["id"] for member in engine.get(KEY)] == ["m1", "m2", "m3"]

    first.future.set_result(None)
    await task_a
    assert [member["id"] for member in engine.get(KEY)] == ["m1", "m2", "m3"]


@pytest.mark.asyncio
async def test_later_failure_after_earlier_reconcile_refetches(engine):
    server_state = copy.deepcopy(ROSTER)

    async def fetch():
        return server_state

    engine.register_fetcher(KEY, fetch)
    first, second = Remote(), Remote()
    task_a = await _start(
        engine,
        _append({"id": "pending-x", "order_index": 2}),
        first,
        reconcile=lambda roster, created: [created if m["id"] == "pending-x" else m for m in roster],
    )

    def promote(roster):
        return [dict(m, role="sales") if m["id"] == "m2" else m for m in roster]

    task_b = await _start(engine, promote, second)

    created = {"id": "m3", "order_index": 2, "role": "daily", "reasons": []}
    server_state.append(created)
    first.future.set_result(created)
    await task_a

    second.future.set_exception(NotFoundError("Member not found"))
    with pytest.raises(NotFoundError):
        await task_b
    await engine.wait_idle()

    assert [member["id"] for member in engine.get(KEY)] == ["m1", "m2", "m3"]
    assert engine.get(KEY)[1]["role"] == "daily"


@pytest.mark.asyncio
async def test_reconcile_replaces_speculative_entry(engine):
    remote = Remote()
    task = await _start(
        engine,
        _append({"id": "pending-1", "order_index": 2}),
        remote,
        reconcile=lambda roster, created: [created if m["id"] == "pending-1" else m for m in roster],
    )

    remote.future.set_result({"id": "m3", "order_index": 2})
    assert await task == {"id": "m3", "order_index": 2}
    assert [member["id"] for member in engine.get(KEY)] == ["m1", "m2", "m3"]


@pytest.mark.asyncio
async def test_success_refetches_authoritative_state(engine):
    calls = []

    async def fetch():
        calls.append(True)
        return [{"id": "m2", "order_index": 0, "role": "daily", "reasons": []}]

    engine.register_fetcher(KEY, fetch)

    async def remove():
        return None

    await engine.mutate(KEY, _remove("m1"), remove)

    assert calls == [True]
    assert engine.get(KEY)[0]["order_index"] == 0


@pytest.mark.asyncio
async def test_late_response_after_cancellation_still_rolls_back(engine):
    before = engine.get(KEY)
    remote = Remote()
    task = await _start(engine, _remove("m1"), remote)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert engine.in_flight(KEY) == 1

    remote.future.set_exception(NotFoundError("Member not found"))
    await engine.wait_idle()

    assert engine.get(KEY) == before
    assert engine.in_flight(KEY) == 0


@pytest.mark.asyncio
async def test_late_success_after_cancellation_reconciles(engine):
    remote = Remote()
    task = await _start(
        engine,
        _append({"id": "pending-1", "order_index": 2}),
        remote,
        reconcile=lambda roster, created: [created if m["id"] == "pending-1" else m for m in roster],
    )

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    remote.future.set_result({"id": "m3", "order_index": 2})
    await engine.wait_idle()

    assert [member["id"] for member in engine.get(KEY)] == ["m1", "m2", "m3"]


@pytest.mark.asyncio
async def test_fetch_overtaken_by_mutation_is_discarded(engine):
    fetch_started = asyncio.Event()
    release = asyncio.Event()

    async def slow_fetch():
        fetch_started.set()
        await release.wait()
        return ROSTER

    engine.register_fetcher(KEY, slow_fetch)
    refetch = asyncio.ensure_future(engine.refetch(KEY))
    await fetch_started.wait()

    remote = Remote()
    mutation = await _start(engine, _remove("m1"), remote)
    release.set()
    await refetch

    assert [member["id"] for member in engine.get(KEY)] == ["m2"]
    remote.future.set_exception(NotFoundError("Member not found"))
    with pytest.raises(NotFoundError):
        await mutation


@pytest.mark.asyncio
async def test_failed_refresh_marks_key_stale(engine):
    async def failing_fetch():
        raise ConnectionError("offline")

    async def remove():
        return None

    engine.register_fetcher(KEY, failing_fetch)
    await engine.mutate(KEY, _remove("m1"), remove)

    assert engine.is_stale(KEY)
    assert [member["id"] for member in engine.get(KEY)] == ["m2"]


@pytest.mark.asyncio
async def test_cached_values_are_not_aliased(engine):
    view = engine.get(KEY)
    view[0]["reasons"].clear()

    assert engine.get(KEY)[0]["reasons"] == [{"id": "r1", "label": "Invoices"}]
