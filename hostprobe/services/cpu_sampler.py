import logging
import time
from typing import Callable

from hostprobe.errors import InvalidDelta
from hostprobe.models.metrics import CPUSnapshot
from hostprobe.services.stat_reader import StatReader

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_INTERVAL = 0.3
# Used instead of a non-positive interval
MIN_SAMPLE_INTERVAL = 0.2


def cpu_usage_between(first: CPUSnapshot, second: CPUSnapshot) -> float:
    """
    Compute the busy share of CPU time between two snapshots, in percent.

    Raises InvalidDelta if the total tick count did not increase, which
    happens after a counter reset or when no time elapsed. The result is
    clamped to [0, 100].
    """
    delta_total = second.total_ticks - first.total_ticks
    delta_idle = second.idle_ticks - first.idle_ticks
    if delta_total <= 0:
        raise InvalidDelta(f"invalid cpu delta (total ticks changed by {delta_total})")

    usage = (delta_total - delta_idle) / delta_total * 100
    return min(max(usage, 0.0), 100.0)


class CPUUsageSampler:
    def __init__(
        self,
        reader: StatReader,
        interval: float = DEFAULT_SAMPLE_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.reader = reader
        self.interval = interval if interval > 0 else MIN_SAMPLE_INTERVAL
        self._sleep = sleep

    def sample(self) -> float:
        """Read two snapshots `interval` seconds apart and return CPU usage in percent."""
        first = self.reader.read_cpu_snapshot()
        self._sleep(self.interval)
        second = self.reader.read_cpu_snapshot()

        usage = cpu_usage_between(first, second)
        logger.debug("CPU usage %.1f%% over %.3fs", usage, self.interval)
        return usage
