"""Helpers for bounded logging of backend response bodies."""

from zfs_dashboard.app.core.settings import settings


def payload_preview(payload: str) -> str | None:
    """Return a bounded payload preview when debug previewing is enabled."""
    if not settings.log_payload_preview:
        return None
    preview = payload[: settings.log_payload_max_chars]
    if len(payload) > settings.log_payload_max_chars:
        return f"{preview}..."
    return preview
