import logging
from typing import List, Sequence, Union

from hostprobe.config import Settings
from hostprobe.errors import MetricReadError
from hostprobe.models.metrics import DiskUsage, MountReadError
from hostprobe.services.alert_formatter import format_bytes

logger = logging.getLogger(__name__)

MetricResult = Union[float, MetricReadError]
DiskResult = Union[Sequence[Union[DiskUsage, MountReadError]], MetricReadError]


def evaluate(
    settings: Settings,
    cpu: MetricResult,
    memory: MetricResult,
    disks: DiskResult,
) -> List[str]:
    """
    Compare collected metrics against the configured thresholds.

    Every argument is either the measured value or the error its collector
    raised. Errors become "read error" lines, values at or above their
    threshold become breach lines. All three metrics are always evaluated;
    the returned lines are ordered CPU, RAM, then disks in scan order.
    A failed scan gives a single disk line; a single inconsistent mount
    gives a line for that mount only.
    """
    alerts: List[str] = []

    _check_percent(alerts, "CPU", cpu, settings.cpu_threshold)
    _check_percent(alerts, "RAM", memory, settings.ram_threshold)

    if isinstance(disks, MetricReadError):
        logger.warning("Disk usage unavailable: %s", disks)
        alerts.append(f"Disk: read error ({disks})")
    else:
        for usage in disks:
            mount_point = display_path(usage.mount_point)
            if isinstance(usage, MountReadError):
                alerts.append(f"Disk {mount_point}: read error ({usage.error})")
            elif usage.used_percent >= settings.disk_threshold:
                alerts.append(
                    f"Disk {mount_point}: {usage.used_percent:.1f}% "
                    f"(used {format_bytes(usage.used_bytes)} of "
                    f"{format_bytes(usage.total_bytes)}, "
                    f"threshold {settings.disk_threshold:.0f}%)"
                )

    return alerts


def display_path(path: str) -> str:
    """Make a mount path safe to put in a message (undecodable bytes become U+FFFD)."""
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def _check_percent(
    alerts: List[str],
    name: str,
    result: MetricResult,
    threshold: float,
) -> None:
    if isinstance(result, MetricReadError):
        logger.warning("%s usage unavailable: %s", name, result)
        alerts.append(f"{name}: read error ({result})")
    elif result >= threshold:
        alerts.append(f"{name}: {result:.1f}% (threshold {threshold:.0f}%)")
