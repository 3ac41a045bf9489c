from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent


class Settings(BaseSettings):
    api_base_url: str = "http://127.0.0.1:3000"
    stats_path: str = "/api/zfs"
    log_stream_path: str = "/api/logs/stream"
    # "backend" streams the backend log feed, "service" shows this service's own logs
    log_source: str = "backend"
    request_timeout_s: float = 10.0
    poll_interval_s: float = 5.0

    log_level: str = "INFO"
    log_format: str = "dev"
    enable_file_logging: bool = False
    log_file_path: str = "/var/log/zfs_dashboard/zfs_dashboard.log"
    log_payload_preview: bool = False
    log_payload_max_chars: int = 512

    ui_state_path: Path = BASE_DIR / "ui_state.json"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
