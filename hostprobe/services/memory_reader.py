import logging

from hostprobe.errors import MalformedData, MetricsUnavailable
from hostprobe.services.stat_reader import StatReader

logger = logging.getLogger(__name__)


class MemoryUsageReader:
    def __init__(self, reader: StatReader) -> None:
        self.reader = reader

    def read(self) -> float:
        """
        Return memory usage in percent, computed as (total - available) / total.

        MemAvailable larger than MemTotal can only come from broken kernel
        data and is reported as MalformedData rather than clamped.
        """
        snapshot = self.reader.read_memory()
        if not snapshot.total_bytes or not snapshot.available_bytes:
            raise MetricsUnavailable("meminfo values not found")
        if snapshot.available_bytes > snapshot.total_bytes:
            raise MalformedData(
                f"MemAvailable ({snapshot.available_bytes}) exceeds "
                f"MemTotal ({snapshot.total_bytes})"
            )

        used = snapshot.total_bytes - snapshot.available_bytes
        usage = used / snapshot.total_bytes * 100
        logger.debug("Memory usage %.1f%%", usage)
        return usage
