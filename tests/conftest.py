import httpx
import pytest

from zfs_dashboard.app.logs.events import CallbackHandle
from zfs_dashboard.app.stats.models import ZfsStats


def make_dataset(
    name: str,
    pool: str,
    *,
    dataset: str | None = None,
    used: str = "1.00G",
    available: str = "9.00G",
    dataset_type: str = "FILESYSTEM",
) -> dict:
    def prop(value: str) -> dict:
        return {"value": value, "source": {"type": "NONE", "data": "-"}}

    record = {
        "name": name,
        "type": dataset_type,
        "pool": pool,
        "createtxg": "1",
        "properties": {
            "used": prop(used),
            "available": prop(available),
            "referenced": prop(used),
            "mountpoint": prop(f"/{name}"),
        },
    }
    if dataset is not None:
        record["dataset"] = dataset
        record["snapshot_name"] = name.split("@", 1)[-1]
    return record


SAMPLE_PAYLOAD = {
    "pools": ["tank", "backup"],
    "filesystems": [
        make_dataset("tank", "tank"),
        make_dataset("backup", "backup"),
        make_dataset("tank/home", "tank"),
        make_dataset("backup/media", "backup"),
        make_dataset("tank/media", "tank"),
    ],
    "snapshots": [
        make_dataset("tank/home@daily-1", "tank", dataset="tank/home", dataset_type="SNAPSHOT"),
        make_dataset("tank/media@daily-1", "tank", dataset="tank/media", dataset_type="SNAPSHOT"),
        make_dataset("tank/home@daily-2", "tank", dataset="tank/home", dataset_type="SNAPSHOT"),
    ],
    "bookmarks": [],
    "total_used": "3.00G",
    "total_available": "27.0G",
}


def sample_stats() -> ZfsStats:
    return ZfsStats.model_validate(SAMPLE_PAYLOAD)


class FakeFetcher:
    """StatsFetcher double returning queued results (stats or exceptions)."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def fetch_once(self) -> ZfsStats:
        self.calls += 1
        result = self.results.pop(0) if self.results else sample_stats()
        if isinstance(result, BaseException):
            raise result
        return result


class FakeEventSource:
    """EventSource double counting subscriptions and replaying lines on demand."""

    def __init__(self, fail_with: Exception | None = None):
        self.fail_with = fail_with
        self.subscribe_calls = 0
        self.handlers: list = []
        self.handles: list[CallbackHandle] = []
        self.closers: list = []

    @property
    def active_subscriptions(self) -> int:
        return len(self.handlers)

    async def subscribe(self, handler, on_closed=None) -> CallbackHandle:
        self.subscribe_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.handlers.append(handler)
        if on_closed is not None:
            self.closers.append(on_closed)
        handle = CallbackHandle(lambda: self._drop(handler))
        self.handles.append(handle)
        return handle

    def _drop(self, handler) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def emit(self, line: str) -> None:
        for handler in list(self.handlers):
            handler(line)

    def end_stream(self) -> None:
        """Drop every subscriber as if the backend closed the stream."""
        closers, self.closers = self.closers, []
        self.handlers.clear()
        for on_closed in closers:
            on_closed()


class RecordingSink:
    def __init__(self):
        self.records: list[tuple[str, str]] = []

    def debug(self, message: str, /) -> None:
        self.records.append(("debug", message))

    def info(self, message: str, /) -> None:
        self.records.append(("info", message))

    def warning(self, message: str, /) -> None:
        self.records.append(("warning", message))

    def error(self, message: str, /) -> None:
        self.records.append(("error", message))


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def async_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver", follow_redirects=True
    ) as client:
        yield client
