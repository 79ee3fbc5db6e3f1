"""Unit tests for CancellationToken and its sharing across RequestClient clones."""
from __future__ import annotations

import asyncio
import threading

import pytest

from clientforge.app.domain.cancellation import CancellationToken
from clientforge.app.domain.models import HttpVersionPref
from clientforge.app.domain.request_client import RequestClient


def _handle() -> RequestClient:
    return RequestClient(
        client=object(),
        async_client=object(),
        http_version_pref=HttpVersionPref.ALL,
        throw_on_status_code=True,
    )


def test_clones_share_one_token():
    handle = _handle()
    clones = [handle.clone() for _ in range(3)]

    clones[1].cancel()

    assert handle.is_cancelled is True
    assert all(clone.is_cancelled for clone in clones)
    assert all(clone.cancel_token is handle.cancel_token for clone in clones)
    assert all(clone.client is handle.client for clone in clones)


def test_cancel_is_idempotent_and_monotone():
    token = CancellationToken()
    calls: list[str] = []
    token.on_cancel(lambda: calls.append("cancelled"))

    token.cancel()
    token.cancel()

    assert token.is_cancelled is True
    assert calls == ["cancelled"]


def test_callback_registered_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls: list[int] = []

    token.on_cancel(lambda: calls.append(1))

    assert calls == [1]


def test_failing_callback_does_not_block_other_observers():
    token = CancellationToken()
    calls: list[str] = []

    def _boom() -> None:
        raise RuntimeError("observer failed")

    token.on_cancel(_boom)
    token.on_cancel(lambda: calls.append("second"))
    token.cancel()

    assert calls == ["second"]


def test_wait_times_out_on_live_token():
    assert CancellationToken().wait(timeout=0.01) is False


def test_wait_observes_cancel_from_another_thread():
    handle = _handle()
    other = handle.clone()
    observed: list[bool] = []

    waiter = threading.Thread(target=lambda: observed.append(handle.cancel_token.wait(timeout=5)))
    waiter.start()
    other.cancel()
    waiter.join(timeout=5)

    assert observed == [True]


def test_concurrent_cancel_calls_are_safe():
    token = CancellationToken()
    threads = [threading.Thread(target=token.cancel) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert token.is_cancelled is True


@pytest.mark.asyncio
async def test_async_waiter_is_woken_by_cancel_from_a_thread():
    token = CancellationToken()
    waiter = asyncio.create_task(token.wait_cancelled())
    await asyncio.sleep(0)

    threading.Thread(target=token.cancel).start()
    await asyncio.wait_for(waiter, timeout=5)

    assert token.is_cancelled is True


@pytest.mark.asyncio
async def test_async_wait_on_cancelled_token_returns_immediately():
    token = CancellationToken()
    token.cancel()

    await asyncio.wait_for(token.wait_cancelled(), timeout=1)


@pytest.mark.asyncio
async def test_abandoned_async_waiter_unregisters_itself():
    token = CancellationToken()
    waiter = asyncio.create_task(token.wait_cancelled())
    await asyncio.sleep(0)

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    assert token._callbacks == []
