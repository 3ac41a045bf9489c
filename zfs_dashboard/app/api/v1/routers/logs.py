import asyncio
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse

from zfs_dashboard.app.core.stores import get_log_store
from zfs_dashboard.app.logs.models import LogBufferOut, LogMessage
from zfs_dashboard.app.logs.store import LogStore

log = logging.getLogger("zfs_dashboard.v1.routers.logs")

router = APIRouter(prefix="/logs", tags=["logs"])

HEARTBEAT_S = 15.0
STREAM_QUEUE_SIZE = 1000


def _buffer_out(store: LogStore) -> LogBufferOut:
    return LogBufferOut(
        is_visible=store.is_visible,
        listener_state=store.listener_state,
        messages=list(store.messages),
    )


@router.get("", name="get_logs", response_model=LogBufferOut)
async def get_logs(store: LogStore = Depends(get_log_store)) -> LogBufferOut:
    return _buffer_out(store)


@router.delete("", name="clear_logs", status_code=status.HTTP_204_NO_CONTENT)
async def clear_logs(store: LogStore = Depends(get_log_store)) -> None:
    store.clear()


@router.post("/visibility", name="toggle_log_visibility", response_model=LogBufferOut)
async def toggle_log_visibility(store: LogStore = Depends(get_log_store)) -> LogBufferOut:
    store.toggle_visibility()
    return _buffer_out(store)


def new_messages(store: LogStore, after_id: int) -> list[LogMessage]:
    """Return buffered messages with an id above ``after_id``, oldest first."""
    fresh: list[LogMessage] = []
    for message in reversed(store.messages):
        if message.id <= after_id:
            break
        fresh.append(message)
    fresh.reverse()
    return fresh


async def event_generator(
    request: Request, queue: asyncio.Queue[str], unsubscribe
) -> AsyncIterator[bytes]:
    # Heartbeat so proxies don't time out
    try:
        while not await request.is_disconnected():
            try:
                msg = await asyncio.wait_for(queue.get(), timeout=HEARTBEAT_S)
                yield f"event: log\ndata: {msg}\n\n".encode("utf-8")
            except asyncio.TimeoutError:
                yield b"event: ping\ndata: {}\n\n"
    except asyncio.CancelledError:
        pass
    finally:
        unsubscribe()
        log.debug("Log stream subscriber removed")


@router.get("/stream", name="stream_logs")
async def stream_logs(request: Request, store: LogStore = Depends(get_log_store)):
    queue: asyncio.Queue[str] = asyncio.Queue(maxsize=STREAM_QUEUE_SIZE)
    last_id = store.next_id - 1

    def on_change(changed: LogStore) -> None:
        nonlocal last_id
        for message in new_messages(changed, last_id):
            try:
                queue.put_nowait(message.model_dump_json())
            except asyncio.QueueFull:
                # drop if the client is too slow; it can reload the buffer
                pass
        last_id = changed.next_id - 1

    unsubscribe = store.subscribe(on_change)
    log.debug("Log stream subscriber added")
    headers = {
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
    return StreamingResponse(
        event_generator(request, queue, unsubscribe),
        media_type="text/event-stream",
        headers=headers,
    )
