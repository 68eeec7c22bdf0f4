import socket
from datetime import datetime
from typing import Optional, Sequence

from hostprobe.models.alert import AlertMessage

_BYTE_UNITS = ["KiB", "MiB", "GiB", "TiB", "PiB"]


def format_bytes(value: int) -> str:
    """Render a byte count with binary units, e.g. 1536 -> '1.5 KiB'."""
    if value < 1024:
        return f"{value} B"
    divisor = 1024
    exponent = 0
    n = value // 1024
    while n >= 1024 and exponent < len(_BYTE_UNITS) - 1:
        divisor *= 1024
        exponent += 1
        n //= 1024
    return f"{value / divisor:.1f} {_BYTE_UNITS[exponent]}"


def get_hostname() -> str:
    try:
        hostname = socket.gethostname()
    except OSError:
        return "unknown"
    return hostname or "unknown"


def build_message(
    alerts: Sequence[str],
    hostname: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Render the alert lines into the notification text.

    hostname and now default to the local host and the current local time
    (with time zone); pass both to get a deterministic result.
    """
    message = AlertMessage(
        hostname=hostname if hostname is not None else get_hostname(),
        timestamp=now if now is not None else datetime.now().astimezone(),
        alerts=list(alerts),
    )
    return message.render()
