from contextlib import asynccontextmanager

from fastapi import FastAPI

from zfs_dashboard.app.core.settings import settings
from zfs_dashboard.app.core.stores import build_log_store, build_stats_store
from zfs_dashboard.app.logs.store import LogStore
from zfs_dashboard.app.logs.ui_state import save_ui_state
from zfs_dashboard.app.stats.poller import StatsPoller


def persist_visibility(log_store: LogStore):
    """Save the UI state whenever the visibility flag changes."""
    last_visible = log_store.is_visible

    def on_change(store: LogStore) -> None:
        nonlocal last_visible
        if store.is_visible != last_visible:
            last_visible = store.is_visible
            save_ui_state(store.ui_state(), settings.ui_state_path)

    return log_store.subscribe(on_change)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1) build stores and their collaborators
    stats_store, fetcher = build_stats_store()
    log_store, event_source = build_log_store()
    app.state.stats_store = stats_store
    app.state.log_store = log_store
    stop_persisting = persist_visibility(log_store)

    # 2) attach to the backend log stream and start polling stats
    await log_store.init_log_listener()
    poller = StatsPoller(stats_store, interval_s=settings.poll_interval_s)
    await poller.start()
    app.state.poller = poller

    try:
        # 3) hand control to FastAPI
        yield
    finally:
        # 4) stop polling first, then drop the subscription and close clients
        await poller.stop()
        log_store.cleanup()
        stop_persisting()
        save_ui_state(log_store.ui_state(), settings.ui_state_path)
        await event_source.close()
        await fetcher.close()
