import json
import logging

import pytest
from fastapi import FastAPI

from conftest import FakeEventSource, FakeFetcher
from zfs_dashboard.app.core import lifespan as lifespan_module
from zfs_dashboard.app.core.settings import settings
from zfs_dashboard.app.core.stores import build_log_store
from zfs_dashboard.app.logs.events import BroadcastEventSource
from zfs_dashboard.app.logs.models import ListenerState
from zfs_dashboard.app.logs.store import LogStore
from zfs_dashboard.app.stats.store import StatsStore


class ClosingFetcher(FakeFetcher):
    closed = False

    async def close(self) -> None:
        self.closed = True


class ClosingEventSource(FakeEventSource):
    closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.mark.anyio
async def test_lifespan_wires_stores_and_persists_visibility(monkeypatch, tmp_path):
    state_path = tmp_path / "ui_state.json"
    monkeypatch.setattr(settings, "ui_state_path", state_path)
    monkeypatch.setattr(settings, "poll_interval_s", 60.0)
    fetcher = ClosingFetcher()
    source = ClosingEventSource()
    monkeypatch.setattr(
        lifespan_module, "build_stats_store", lambda: (StatsStore(fetcher), fetcher)
    )
    monkeypatch.setattr(
        lifespan_module, "build_log_store", lambda: (LogStore(source), source)
    )
    app = FastAPI()

    async with lifespan_module.lifespan(app):
        log_store: LogStore = app.state.log_store
        assert log_store.listener_state is ListenerState.REGISTERED
        assert source.active_subscriptions == 1

        log_store.toggle_visibility()
        assert json.loads(state_path.read_text()) == {"is_visible": False}

    assert source.active_subscriptions == 0
    assert log_store.listener_state is ListenerState.UNREGISTERED
    assert not app.state.poller.running
    assert fetcher.closed and source.closed
    assert json.loads(state_path.read_text()) == {"is_visible": False}


@pytest.mark.anyio
async def test_main_app_exposes_health_and_routes():
    from zfs_dashboard.app.main import app, get_healthz

    assert await get_healthz() == {"status": "ok"}
    paths = {route.path for route in app.routes}
    assert {"/healthz", "/api/v1/stats", "/api/v1/logs/stream"} <= paths


@pytest.mark.anyio
async def test_service_log_source_feeds_own_records_until_closed(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "log_source", "service")
    monkeypatch.setattr(settings, "ui_state_path", tmp_path / "ui_state.json")
    store, source = build_log_store()
    assert isinstance(source, BroadcastEventSource)

    await store.init_log_listener()
    service_log = logging.getLogger("zfs_dashboard.stats.store")
    service_log.warning("pool tank degraded")
    await source.close()
    service_log.warning("after close")

    assert len(store.messages) == 1
    assert store.messages[0].content.endswith(
        "WARNING zfs_dashboard.stats.store: pool tank degraded"
    )
