"""Load and save the persisted log panel state."""

import logging
from pathlib import Path

from pydantic import ValidationError

from zfs_dashboard.app.logs.models import UiState


log = logging.getLogger("zfs_dashboard.logs.ui_state")


def load_ui_state(path: Path) -> UiState:
    """Read the saved state, falling back to defaults for a missing or corrupt file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return UiState()
    except OSError as exc:
        log.warning("ui_state_unreadable path=%s reason=%s", path, exc)
        return UiState()

    try:
        return UiState.model_validate_json(raw)
    except ValidationError as exc:
        log.warning("ui_state_invalid path=%s errors=%d", path, exc.error_count())
        return UiState()


def save_ui_state(state: UiState, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(), encoding="utf-8")
    log.debug("ui_state_saved path=%s is_visible=%s", path, state.is_visible)
