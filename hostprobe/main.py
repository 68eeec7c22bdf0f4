import logging
import sys
from typing import Callable, List, Optional, TypeVar, Union

from hostprobe.config import Settings
from hostprobe.errors import ConfigError, DispatchError, MetricReadError
from hostprobe.logging_config import configure_logging
from hostprobe.services.alert_dispatcher import AlertDispatcher
from hostprobe.services.alert_formatter import build_message
from hostprobe.services.cpu_sampler import CPUUsageSampler
from hostprobe.services.disk_scanner import DiskUsageScanner
from hostprobe.services.evaluator import evaluate
from hostprobe.services.memory_reader import MemoryUsageReader
from hostprobe.services.stat_reader import StatReader

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _attempt(collect: Callable[[], T]) -> Union[T, MetricReadError]:
    try:
        return collect()
    except MetricReadError as exc:
        return exc


def run(
    settings: Settings,
    cpu_sampler: Optional[CPUUsageSampler] = None,
    memory_reader: Optional[MemoryUsageReader] = None,
    disk_scanner: Optional[DiskUsageScanner] = None,
    dispatcher: Optional[AlertDispatcher] = None,
) -> List[str]:
    """
    Execute one probe: collect, evaluate and, if needed, dispatch.

    Collectors default to readers over the live /proc; tests pass their own.
    Returns the alert lines (empty if nothing was sent). DispatchError
    propagates to the caller.
    """
    reader = StatReader()
    cpu_sampler = cpu_sampler or CPUUsageSampler(reader, interval=settings.cpu_sample_interval)
    memory_reader = memory_reader or MemoryUsageReader(reader)
    disk_scanner = disk_scanner or DiskUsageScanner(
        reader, exclude_fstypes=settings.disk_fstype_exclude
    )

    alerts = evaluate(
        settings,
        cpu=_attempt(cpu_sampler.sample),
        memory=_attempt(memory_reader.read),
        disks=_attempt(disk_scanner.scan),
    )
    if not alerts:
        logger.info("All metrics below thresholds, nothing to send")
        return alerts

    logger.info("Sending alert with %d issue(s)", len(alerts))
    dispatcher = dispatcher or AlertDispatcher(settings)
    dispatcher.send(build_message(alerts))
    return alerts


def main() -> int:
    configure_logging()
    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        logger.critical("Configuration error: %s", exc)
        return 1
    logging.getLogger().setLevel(settings.log_level)

    try:
        run(settings)
    except DispatchError as exc:
        logger.critical("Alert dispatch failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
