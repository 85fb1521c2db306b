from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from bridge.services.session_janitor import SessionJanitor
from bridge.services.session_store import InMemorySessionStore, SessionRecord


def _seed(store: InMemorySessionStore, key: str, *, idle: timedelta) -> None:
    at = datetime.now(UTC) - idle
    user_id, channel_id = key.split("_", 1)
    store.put(
        key,
        SessionRecord(
            provider_session_id=f"sess_{key}",
            user_id=user_id,
            channel_id=channel_id,
            user_name=user_id,
            created_at=at,
            last_activity_at=at,
        ),
    )


def test_run_once_sweeps_idle_sessions() -> None:
    store = InMemorySessionStore()
    _seed(store, "old_c", idle=timedelta(minutes=90))
    _seed(store, "fresh_c", idle=timedelta(minutes=10))
    janitor = SessionJanitor(session_store=store, interval_sec=1800, max_idle_sec=3600)

    assert janitor.run_once() == 1
    assert store.get("old_c") is None
    assert store.get("fresh_c") is not None


@pytest.mark.asyncio
async def test_janitor_sweeps_on_its_own_schedule() -> None:
    store = InMemorySessionStore()
    _seed(store, "old_c", idle=timedelta(minutes=90))
    janitor = SessionJanitor(session_store=store, interval_sec=0.01, max_idle_sec=3600)

    janitor.start()
    assert janitor.running is True
    for _ in range(100):
        if store.size() == 0:
            break
        await asyncio.sleep(0.01)
    await janitor.stop()

    assert store.size() == 0
    assert janitor.running is False


@pytest.mark.asyncio
async def test_janitor_start_is_idempotent_and_stop_is_safe() -> None:
    janitor = SessionJanitor(session_store=InMemorySessionStore(), interval_sec=60)

    await janitor.stop()
    janitor.start()
    janitor.start()
    assert janitor.running is True
    await janitor.stop()
    await janitor.stop()
    assert janitor.running is False
