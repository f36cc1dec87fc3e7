import asyncio
import logging

import pytest

from folio.providers import SimpleOrchestrationProvider


@pytest.fixture
def orchestration(orchestration_config):
    return SimpleOrchestrationProvider(orchestration_config)


@pytest.mark.asyncio
async def test_submit_runs_in_background(orchestration):
    seen = []

    async def work(value):
        seen.append(value)

    assert orchestration.submit("work", work, 1)
    await orchestration.drain()

    assert seen == [1]
    assert orchestration.pending == 0


@pytest.mark.asyncio
async def test_rejects_when_full(orchestration):
    release = asyncio.Event()

    async def blocked():
        await release.wait()

    assert orchestration.submit("one", blocked)
    assert orchestration.submit("two", blocked)
    assert orchestration.submit("three", blocked) is False
    assert orchestration.pending == 2

    release.set()
    await orchestration.drain()
    assert orchestration.pending == 0


@pytest.mark.asyncio
async def test_failures_are_logged_not_raised(orchestration, caplog):
    async def broken():
        raise RuntimeError("boom")

    with caplog.at_level(logging.WARNING):
        orchestration.submit("broken", broken)
        await orchestration.drain()
        # done callbacks run on the next loop iteration
        await asyncio.sleep(0)

    assert "broken" in caplog.text
    assert orchestration.pending == 0
