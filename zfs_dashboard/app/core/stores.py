import logging

from fastapi import Request

from zfs_dashboard.app.core.settings import settings
from zfs_dashboard.app.logs.events import BroadcastEventSource, HttpEventSource
from zfs_dashboard.app.logs.store import LogStore
from zfs_dashboard.app.logs.ui_state import load_ui_state
from zfs_dashboard.app.stats.fetcher import HttpStatsFetcher
from zfs_dashboard.app.stats.store import StatsStore

SERVICE_LOGGER = "zfs_dashboard"


def build_stats_store() -> tuple[StatsStore, HttpStatsFetcher]:
    fetcher = HttpStatsFetcher(settings.api_base_url)
    return StatsStore(fetcher), fetcher


def build_log_source() -> HttpEventSource | BroadcastEventSource:
    if settings.log_source == "service":
        source = BroadcastEventSource()
        source.attach_logger(logging.getLogger(SERVICE_LOGGER))
        return source
    return HttpEventSource(settings.api_base_url)


def build_log_store() -> tuple[LogStore, HttpEventSource | BroadcastEventSource]:
    source = build_log_source()
    store = LogStore(source)
    store.apply_ui_state(load_ui_state(settings.ui_state_path))
    return store, source


def get_stats_store(request: Request) -> StatsStore:
    return request.app.state.stats_store


def get_log_store(request: Request) -> LogStore:
    return request.app.state.log_store
