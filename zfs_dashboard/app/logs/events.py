"""Log event sources: the backend SSE stream and an in-process broadcaster."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from collections.abc import AsyncIterator, Callable
from typing import Optional, Protocol

import httpx

from zfs_dashboard.app.core.settings import settings

log = logging.getLogger("zfs_dashboard.logs.events")

LogLineHandler = Callable[[str], None]
StreamClosedHandler = Callable[[], None]

SERVICE_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class EventStreamError(Exception):
    """Raised when the backend log stream cannot be opened."""


class ListenerHandle(Protocol):
    def cancel(self) -> None: ...


class EventSource(Protocol):
    async def subscribe(
        self,
        handler: LogLineHandler,
        on_closed: StreamClosedHandler | None = None,
    ) -> ListenerHandle: ...


class CallbackHandle:
    """Handle that runs ``on_cancel`` exactly once."""

    def __init__(self, on_cancel: Callable[[], None]):
        self._on_cancel: Optional[Callable[[], None]] = on_cancel

    @property
    def cancelled(self) -> bool:
        return self._on_cancel is None

    def cancel(self) -> None:
        on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()


class BroadcastEventSource:
    """Fan published lines out to every subscribed handler, in arrival order."""

    def __init__(self) -> None:
        self._handlers: dict[int, LogLineHandler] = {}
        self._ids = itertools.count(1)
        self._attached: list[tuple[logging.Logger, EventStreamHandler]] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def attach_logger(
        self, logger: logging.Logger, level: int = logging.INFO
    ) -> EventStreamHandler:
        """Publish every record of ``logger`` (and its children) as a log line."""
        handler = EventStreamHandler(self, level)
        handler.setFormatter(logging.Formatter(SERVICE_LOG_FORMAT))
        logger.addHandler(handler)
        self._attached.append((logger, handler))
        return handler

    async def close(self) -> None:
        for logger, handler in self._attached:
            logger.removeHandler(handler)
            handler.close()
        self._attached = []
        self._handlers.clear()

    async def subscribe(
        self,
        handler: LogLineHandler,
        on_closed: StreamClosedHandler | None = None,
    ) -> CallbackHandle:
        # In-process source: it only ends through the returned handle
        key = next(self._ids)
        self._handlers[key] = handler
        log.debug("Subscriber added size=%d", len(self._handlers))

        def remove() -> None:
            self._handlers.pop(key, None)
            log.debug("Subscriber removed size=%d", len(self._handlers))

        return CallbackHandle(remove)

    def publish(self, line: str) -> None:
        for handler in list(self._handlers.values()):
            try:
                handler(line)
            except Exception:
                log.exception("log line handler failed")


class EventStreamHandler(logging.Handler):
    """Publish formatted log records into a ``BroadcastEventSource``."""

    def __init__(self, source: BroadcastEventSource, level: int = logging.NOTSET):
        super().__init__(level)
        self.source = source
        self._emitting = False

    def emit(self, record: logging.LogRecord) -> None:
        # Records raised while publishing would loop back into this handler
        if self._emitting:
            return
        self._emitting = True
        try:
            message = self.format(record)
            if message.strip():
                self.source.publish(message)
        except Exception:
            self.handleError(record)
        finally:
            self._emitting = False


def parse_event_data(data: str) -> str:
    """Extract the log line from one SSE ``data`` payload.

    The backend sends ``{"message": "..."}``; anything else is passed through.
    """
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        return data
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        return payload["message"]
    return data


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the joined ``data`` field of each Server-Sent Event."""
    data_lines: list[str] = []
    async for line in lines:
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if field == "data":
            data_lines.append(value[1:] if value.startswith(" ") else value)
    if data_lines:
        yield "\n".join(data_lines)


class HttpEventSource:
    """Subscribe to the backend's ``text/event-stream`` of log lines."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        path: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._path = path or settings.log_stream_path
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
            timeout=httpx.Timeout(settings.request_timeout_s, read=None),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def subscribe(
        self,
        handler: LogLineHandler,
        on_closed: StreamClosedHandler | None = None,
    ) -> CallbackHandle:
        """Open the stream; ``on_closed`` runs if it ends without being cancelled."""
        request = self._client.build_request("GET", self._path)
        response = await self._client.send(request, stream=True)
        if response.is_error:
            await response.aclose()
            raise EventStreamError(
                f"log stream {self._path} answered HTTP {response.status_code}"
            )

        log.info("Log stream connected path=%s", self._path)
        task = asyncio.create_task(self._pump(response, handler, on_closed))
        return CallbackHandle(task.cancel)

    async def _pump(
        self,
        response: httpx.Response,
        handler: LogLineHandler,
        on_closed: StreamClosedHandler | None,
    ) -> None:
        try:
            async for data in iter_sse_data(response.aiter_lines()):
                try:
                    handler(parse_event_data(data))
                except Exception:
                    log.exception("log line handler failed")
            log.warning("Log stream closed by backend path=%s", self._path)
        except asyncio.CancelledError:
            log.debug("Log stream cancelled path=%s", self._path)
            raise
        except httpx.HTTPError as exc:
            log.error("Log stream lost path=%s error=%s", self._path, exc)
        finally:
            await response.aclose()

        if on_closed is not None:
            on_closed()
