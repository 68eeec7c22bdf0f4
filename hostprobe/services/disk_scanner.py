import logging
import os
from typing import Callable, FrozenSet, Iterable, List, Optional, Set, Union

from hostprobe.models.metrics import DiskUsage, MountReadError
from hostprobe.services.stat_reader import StatReader

logger = logging.getLogger(__name__)

# Pseudo and virtual filesystems that have no meaningful disk usage
DEFAULT_FSTYPE_EXCLUDE: FrozenSet[str] = frozenset(
    {
        "proc",
        "sysfs",
        "devtmpfs",
        "tmpfs",
        "devpts",
        "cgroup",
        "cgroup2",
        "mqueue",
        "hugetlbfs",
        "debugfs",
        "tracefs",
        "pstore",
        "securityfs",
        "rpc_pipefs",
        "configfs",
        "fusectl",
        "overlay",
        "squashfs",
        "autofs",
        "binfmt_misc",
        "nsfs",
        "ramfs",
        "efivarfs",
        "bpf",
        "selinuxfs",
        "cgroupfs",
    }
)


class DiskUsageScanner:
    """
    Measure usage for every real filesystem in the mount table.

    Mount points are deduplicated by first occurrence, since bind mounts and
    overlays can list the same path more than once. A mount that cannot be
    statted, or that reports zero blocks, is skipped without an error: it
    usually vanished between listing and statting. A mount whose numbers
    are inconsistent (more available than total space) is returned as a
    MountReadError in its scan position.
    """

    def __init__(
        self,
        reader: StatReader,
        exclude_fstypes: Optional[Iterable[str]] = None,
        statvfs: Callable[[str], os.statvfs_result] = os.statvfs,
    ) -> None:
        self.reader = reader
        self.exclude_fstypes = frozenset(
            DEFAULT_FSTYPE_EXCLUDE if exclude_fstypes is None else exclude_fstypes
        )
        self._statvfs = statvfs

    def scan(self) -> List[Union[DiskUsage, MountReadError]]:
        seen: Set[str] = set()
        usages: List[Union[DiskUsage, MountReadError]] = []

        for entry in self.reader.read_mount_table():
            if entry.fs_type in self.exclude_fstypes:
                continue
            if entry.mount_point in seen:
                continue
            seen.add(entry.mount_point)

            usage = self._measure(entry.mount_point)
            if usage is not None:
                usages.append(usage)

        return usages

    def _measure(self, mount_point: str) -> Optional[Union[DiskUsage, MountReadError]]:
        try:
            stat = self._statvfs(mount_point)
        except OSError as exc:
            logger.debug("Skipping %s: statvfs failed (%s)", mount_point, exc)
            return None

        block_size = stat.f_frsize or stat.f_bsize
        total = stat.f_blocks * block_size
        if total == 0:
            logger.debug("Skipping %s: zero total blocks", mount_point)
            return None

        available = stat.f_bavail * block_size
        if available > total:
            error = f"available bytes ({available}) exceed total bytes ({total})"
            logger.warning("Inconsistent statistics for %s: %s", mount_point, error)
            return MountReadError(mount_point=mount_point, error=error)

        used = total - available
        return DiskUsage(
            mount_point=mount_point,
            used_percent=used / total * 100,
            used_bytes=used,
            available_bytes=available,
            total_bytes=total,
        )
