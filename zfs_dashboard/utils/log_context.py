"""Per-fetch correlation id, so log lines of overlapping stats fetches can be told apart."""

from contextvars import ContextVar, Token


_fetch_id_var: ContextVar[str] = ContextVar("fetch_id", default="-")


def get_fetch_id() -> str:
    """Id of the fetch_stats call running in this task, or "-" outside one."""
    return _fetch_id_var.get()


def set_fetch_id(fetch_id: str) -> Token[str]:
    return _fetch_id_var.set(fetch_id)


def reset_fetch_id(token: Token[str]) -> None:
    """Restore whatever id was active before the matching set_fetch_id."""
    _fetch_id_var.reset(token)
