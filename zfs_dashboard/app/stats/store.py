"""In-memory store for the latest ZFS stats payload."""

from datetime import datetime, timezone
import logging
from uuid import uuid4

from zfs_dashboard.app.core.observable import Observable
from zfs_dashboard.app.stats import sizes
from zfs_dashboard.app.stats.fetcher import StatsFetcher
from zfs_dashboard.app.stats.models import Dataset, StoreStatus, ZfsStats
from zfs_dashboard.utils.log_context import reset_fetch_id, set_fetch_id


log = logging.getLogger("zfs_dashboard.stats.store")
DEFAULT_FETCH_ERROR = "Failed to fetch ZFS stats"


class StatsStore(Observable):
    """Latest stats payload plus loading/error bookkeeping.

    Overlapping ``fetch_stats`` calls are not deduplicated. Each one writes
    its outcome when it finishes, so the last call to complete determines
    ``stats`` and ``error``.
    """

    parse_size = staticmethod(sizes.parse_size)
    format_size = staticmethod(sizes.format_size)
    get_usage_percentage = staticmethod(sizes.get_usage_percentage)

    def __init__(self, fetcher: StatsFetcher):
        super().__init__()
        self._fetcher = fetcher
        self.stats: ZfsStats | None = None
        self.loading = False
        self.error: str | None = None
        self.last_updated: datetime | None = None

    def status(self) -> StoreStatus:
        """Return an immutable view of the current state."""
        return StoreStatus(
            stats=self.stats,
            loading=self.loading,
            error=self.error,
            last_updated=self.last_updated,
        )

    async def fetch_stats(self) -> None:
        """Fetch one payload; failures land in ``error`` and keep the old stats."""
        token = set_fetch_id(uuid4().hex[:8])
        self.loading = True
        self.error = None
        self._notify()
        try:
            data = await self._fetcher.fetch_once()
            self.stats = data
            self.error = None
            self.last_updated = datetime.now(timezone.utc)
            log.info(
                "stats_fetched pools=%d filesystems=%d snapshots=%d",
                len(data.pools),
                len(data.filesystems),
                len(data.snapshots),
            )
        except Exception as exc:
            self.error = str(exc) or DEFAULT_FETCH_ERROR
            log.error("Failed to fetch ZFS stats: %s", self.error)
        finally:
            self.loading = False
            self._notify()
            reset_fetch_id(token)

    async def refresh_stats(self) -> None:
        await self.fetch_stats()

    def get_filesystems_by_pool(self, pool_name: str) -> list[Dataset]:
        if self.stats is None:
            return []
        return [fs for fs in self.stats.filesystems if fs.pool == pool_name]

    def get_snapshots_by_dataset(self, dataset_name: str) -> list[Dataset]:
        if self.stats is None:
            return []
        return [snap for snap in self.stats.snapshots if snap.dataset == dataset_name]
