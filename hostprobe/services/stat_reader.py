import logging
import re
from pathlib import Path
from typing import List, Union

from hostprobe.errors import MalformedData, SourceUnavailable
from hostprobe.models.metrics import CPUSnapshot, MemorySnapshot, MountEntry

logger = logging.getLogger(__name__)

CPU_STATS = "cpu-stats"
MEMORY_STATS = "memory-stats"
MOUNT_TABLE = "mount-table"

# Relative to the proc root
_SOURCE_PATHS = {
    CPU_STATS: "stat",
    MEMORY_STATS: "meminfo",
    MOUNT_TABLE: "self/mounts",
}

# The kernel escapes space, tab, newline and backslash in mount paths as \ooo
_MOUNT_ESCAPE = re.compile(r"\\([0-7]{3})")


def _unescape_mount_field(value: str) -> str:
    return _MOUNT_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), value)


class StatReader:
    """
    Read and parse the kernel's text statistics under a proc root.

    All reads go through _read_lines, which turns any OSError into
    SourceUnavailable. Parsers tolerate lines they do not know about and raise
    MalformedData only for a required line whose fields cannot be parsed.
    """

    def __init__(self, proc_root: Union[str, Path] = "/proc") -> None:
        self.proc_root = Path(proc_root)

    def read(self, source: str):
        """Dispatch by logical source name (cpu-stats, memory-stats, mount-table)."""
        readers = {
            CPU_STATS: self.read_cpu_snapshot,
            MEMORY_STATS: self.read_memory,
            MOUNT_TABLE: self.read_mount_table,
        }
        try:
            reader = readers[source]
        except KeyError:
            raise ValueError(f"unknown stat source {source!r}") from None
        return reader()

    def _path(self, source: str) -> Path:
        return self.proc_root / _SOURCE_PATHS[source]

    def _read_lines(self, source: str) -> List[str]:
        path = self._path(source)
        try:
            with path.open("r", encoding="utf-8", errors="surrogateescape") as handle:
                return handle.read().splitlines()
        except OSError as exc:
            raise SourceUnavailable(f"cannot read {path}: {exc.strerror or exc}") from exc

    def read_cpu_snapshot(self) -> CPUSnapshot:
        """
        Parse the aggregate 'cpu ' line.

        Columns are user, nice, system, idle, iowait, irq, ... in clock ticks.
        Idle time includes iowait when the kernel reports it; the total is
        the sum of every column.
        """
        for line in self._read_lines(CPU_STATS):
            if not line.startswith("cpu "):
                continue
            fields = line.split()
            if len(fields) < 5:
                raise MalformedData("invalid cpu fields")
            if not all(_is_unsigned(field) for field in fields[1:]):
                raise MalformedData(f"invalid cpu fields: {line!r}")
            values = [int(field) for field in fields[1:]]

            idle = values[3]
            if len(values) > 4:
                idle += values[4]
            return CPUSnapshot(idle_ticks=idle, total_ticks=sum(values))

        raise MalformedData("cpu line not found")

    def read_memory(self) -> MemorySnapshot:
        total = 0
        available = 0
        for line in self._read_lines(MEMORY_STATS):
            if line.startswith("MemTotal:"):
                total = _parse_meminfo_bytes(line)
            elif line.startswith("MemAvailable:"):
                available = _parse_meminfo_bytes(line)
            if total and available:
                break
        return MemorySnapshot(total_bytes=total, available_bytes=available)

    def read_mount_table(self) -> List[MountEntry]:
        entries: List[MountEntry] = []
        for line in self._read_lines(MOUNT_TABLE):
            fields = line.split()
            if len(fields) < 3:
                continue
            entries.append(
                MountEntry(
                    device=_unescape_mount_field(fields[0]),
                    mount_point=_unescape_mount_field(fields[1]),
                    fs_type=fields[2],
                    options=fields[3] if len(fields) > 3 else "",
                )
            )
        logger.debug("Read %d mount table rows", len(entries))
        return entries


def _parse_meminfo_bytes(line: str) -> int:
    """Convert a line like 'MemTotal:  8000000 kB' into bytes."""
    fields = line.split()
    if len(fields) < 2:
        raise MalformedData(f"missing value in meminfo line {line!r}")
    if not _is_unsigned(fields[1]):
        raise MalformedData(f"invalid value in meminfo line {line!r}")
    return int(fields[1]) * 1024


def _is_unsigned(field: str) -> bool:
    # Plain ASCII digits only; int() alone would also take "+5", "1_000" or "-1"
    return field.isascii() and field.isdigit()
