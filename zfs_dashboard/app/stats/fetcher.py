from __future__ import annotations

import logging
from typing import Protocol

import httpx

from zfs_dashboard.app.core.settings import settings
from zfs_dashboard.app.stats.models import ZfsStats
from zfs_dashboard.utils.log_safety import payload_preview

log = logging.getLogger("zfs_dashboard.stats.fetcher")


class StatsFetchError(Exception):
    """Raised when the backend answers a stats request with a non-2xx status."""


class StatsFetcher(Protocol):
    async def fetch_once(self) -> ZfsStats: ...


class HttpStatsFetcher:
    """One GET per call against the backend's ZFS stats endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._path = path or settings.stats_path
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers={"Accept": "application/json"},
            timeout=settings.request_timeout_s,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def fetch_once(self) -> ZfsStats:
        log.debug("Requesting ZFS stats path=%s", self._path)
        r = await self._client.get(self._path)
        if r.is_error:
            detail = r.text.strip()
            log.warning("Stats request failed status=%s", r.status_code)
            raise StatsFetchError(detail or f"HTTP {r.status_code}")

        preview = payload_preview(r.text)
        if preview:
            log.debug("Stats payload preview=%s", preview)
        stats = ZfsStats.model_validate(r.json())
        log.debug(
            "Stats received filesystems=%d snapshots=%d",
            len(stats.filesystems),
            len(stats.snapshots),
        )
        return stats
