"""Append-only buffer of backend log lines and its event subscription."""

import asyncio
from datetime import datetime, timezone
import logging
from typing import Optional

from zfs_dashboard.app.core.observable import Observable
from zfs_dashboard.app.logs.events import EventSource, ListenerHandle
from zfs_dashboard.app.logs.models import ListenerState, LogMessage, UiState
from zfs_dashboard.utils.diagnostics import DiagnosticSink, LoggerSink


log = logging.getLogger("zfs_dashboard.logs.store")

# Scheduler noise emitted by the backend on every slow tick
NOISY_LINE_MARKER = "task queue exceeded allotted deadline"


class LogStore(Observable):
    """Buffered backend log lines with a single live event subscription."""

    def __init__(
        self,
        source: EventSource,
        sink: DiagnosticSink | None = None,
        *,
        is_visible: bool = True,
    ):
        super().__init__()
        self._source = source
        self._sink = sink or LoggerSink(log)
        self._handle: Optional[ListenerHandle] = None
        self._next_id = 1
        self.messages: list[LogMessage] = []
        self.is_visible = is_visible
        self.listener_state = ListenerState.UNREGISTERED

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def listener_registered(self) -> bool:
        return self.listener_state is ListenerState.REGISTERED

    def toggle_visibility(self) -> None:
        self.is_visible = not self.is_visible
        self._notify()

    def ui_state(self) -> UiState:
        return UiState(is_visible=self.is_visible)

    def apply_ui_state(self, state: UiState) -> None:
        if state.is_visible != self.is_visible:
            self.is_visible = state.is_visible
            self._notify()

    async def init_log_listener(self) -> None:
        """Subscribe to the event source unless a subscription exists or is pending.

        Failures are reported to the diagnostic sink and leave the store
        unregistered so a later call can retry.
        """
        if self.listener_state is not ListenerState.UNREGISTERED:
            return
        # Committed before the first await so overlapping calls return above
        self.listener_state = ListenerState.REGISTERING

        try:
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None

            self._handle = await self._source.subscribe(
                self._on_log_line, on_closed=self._on_stream_closed
            )
            self.listener_state = ListenerState.REGISTERED
        except asyncio.CancelledError:
            self.listener_state = ListenerState.UNREGISTERED
            raise
        except Exception as exc:
            self.listener_state = ListenerState.UNREGISTERED
            self._sink.error(f"Error initializing log listener: {exc}")
        self._notify()

    def _on_stream_closed(self) -> None:
        if self._handle is None:
            return
        self._sink.warning("Log event stream closed; listener unregistered")
        self._handle = None
        self.listener_state = ListenerState.UNREGISTERED
        self._notify()

    def _on_log_line(self, line: str) -> None:
        if NOISY_LINE_MARKER in line:
            return
        self.add_message(line)

    def add_message(self, content: str) -> None:
        if not content.strip():
            return

        self.messages.append(
            LogMessage(
                id=self._next_id,
                content=content,
                timestamp=datetime.now(timezone.utc),
            )
        )
        self._next_id += 1
        self._notify()

    def cleanup(self) -> None:
        if self._handle is None:
            return
        self._sink.debug("Cleaning up log event listener")
        self._handle.cancel()
        self._handle = None
        self.listener_state = ListenerState.UNREGISTERED
        self._notify()

    def clear(self) -> None:
        self.messages = []
        self._notify()
