import math
import os
from typing import FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from hostprobe.errors import ConfigError
from hostprobe.services.disk_scanner import DEFAULT_FSTYPE_EXCLUDE

DEFAULT_API_URL = "https://acmen.ru/api/v1/telegram/"
DEFAULT_THRESHOLD = 80.0
DEFAULT_SAMPLE_INTERVAL_MS = 300.0

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Notification endpoint
    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="URL the alert message is POSTed to",
    )
    api_token: str = Field(
        ...,
        min_length=1,
        description="Bearer token for the notification API",
    )
    chat_id: str = Field(
        ...,
        min_length=1,
        description="Destination chat identifier",
    )
    message_thread_id: Optional[str] = Field(
        default=None,
        description="Optional thread inside the chat; omitted from the payload when unset",
    )

    # Thresholds in percent, a value equal to the threshold counts as a breach
    cpu_threshold: float = Field(default=DEFAULT_THRESHOLD)
    ram_threshold: float = Field(default=DEFAULT_THRESHOLD)
    disk_threshold: float = Field(default=DEFAULT_THRESHOLD)

    cpu_sample_interval: float = Field(
        default=DEFAULT_SAMPLE_INTERVAL_MS / 1000,
        description="Seconds between the two CPU counter snapshots",
    )
    disk_fstype_exclude: FrozenSet[str] = Field(
        default=DEFAULT_FSTYPE_EXCLUDE,
        description="Filesystem types that are never measured (pseudo/virtual filesystems)",
    )
    log_level: str = Field(default="INFO")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build the settings for one run from environment variables.

        Optional values that are blank or unparsable fall back to their
        defaults. A missing API_TOKEN or CHAT_ID raises ConfigError.
        """
        env = os.environ if environ is None else environ

        def get(key: str) -> str:
            return (env.get(key) or "").strip()

        api_token = get("API_TOKEN")
        chat_id = get("CHAT_ID")
        if not api_token:
            raise ConfigError("API_TOKEN is required")
        if not chat_id:
            raise ConfigError("CHAT_ID is required")

        # DISK_FSTYPE_EXCLUDE replaces the built-in set, same list format as before
        raw_exclude = get("DISK_FSTYPE_EXCLUDE")
        fstype_exclude = frozenset(
            item.strip() for item in raw_exclude.split(",") if item.strip()
        ) or DEFAULT_FSTYPE_EXCLUDE

        log_level = get("LOG_LEVEL").upper()
        if log_level not in _LOG_LEVELS:
            log_level = "INFO"

        return cls(
            api_url=get("API_URL") or DEFAULT_API_URL,
            api_token=api_token,
            chat_id=chat_id,
            message_thread_id=get("MESSAGE_THREAD_ID") or None,
            cpu_threshold=_parse_float(get("CPU_THRESHOLD"), DEFAULT_THRESHOLD),
            ram_threshold=_parse_float(get("RAM_THRESHOLD"), DEFAULT_THRESHOLD),
            disk_threshold=_parse_float(get("DISK_THRESHOLD"), DEFAULT_THRESHOLD),
            cpu_sample_interval=_parse_float(
                get("CPU_SAMPLE_INTERVAL_MS"), DEFAULT_SAMPLE_INTERVAL_MS
            )
            / 1000,
            disk_fstype_exclude=fstype_exclude,
            log_level=log_level,
        )


def _parse_float(raw: str, default: float) -> float:
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default
