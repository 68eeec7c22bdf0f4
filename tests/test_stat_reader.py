import os

import pytest

from hostprobe.errors import MalformedData, SourceUnavailable
from hostprobe.models.metrics import CPUSnapshot, MemorySnapshot
from hostprobe.services.stat_reader import StatReader

PROC_STAT = """\
cpu  100 20 30 400 50 0 0 0 0 0
cpu0 50 10 15 200 25 0 0 0 0 0
intr 12345
ctxt 67890
"""

MEMINFO = """\
MemTotal:        8000000 kB
MemFree:         1000000 kB
MemAvailable:    2000000 kB
Buffers:          100000 kB
"""

MOUNTS = """\
/dev/sda1 / ext4 rw,relatime 0 0
proc /proc proc rw,nosuid 0 0
/dev/sdb1 /mnt/my\\040disk ext4 rw 0 0
garbage
"""


@pytest.fixture
def proc_root(tmp_path):
    (tmp_path / "self").mkdir()
    (tmp_path / "stat").write_text(PROC_STAT)
    (tmp_path / "meminfo").write_text(MEMINFO)
    (tmp_path / "self" / "mounts").write_text(MOUNTS)
    return tmp_path


def test_read_cpu_snapshot_counts_iowait_as_idle(proc_root):
    snapshot = StatReader(proc_root).read_cpu_snapshot()

    assert snapshot == CPUSnapshot(idle_ticks=450, total_ticks=600)


def test_read_cpu_snapshot_without_iowait(tmp_path):
    (tmp_path / "stat").write_text("cpu  10 0 10 80\n")

    snapshot = StatReader(tmp_path).read_cpu_snapshot()
    assert snapshot.idle_ticks == 80
    assert snapshot.total_ticks == 100


@pytest.mark.parametrize(
    "content, message",
    [
        ("cpu0 1 2 3 4 5\nintr 1\n", "cpu line not found"),
        ("cpu  1 2 3\n", "invalid cpu fields"),
        ("cpu  1 2 x 4 5\n", "invalid cpu fields"),
    ],
)
def test_read_cpu_snapshot_malformed(tmp_path, content, message):
    (tmp_path / "stat").write_text(content)

    with pytest.raises(MalformedData, match=message):
        StatReader(tmp_path).read_cpu_snapshot()


def test_missing_source_raises_source_unavailable(tmp_path):
    reader = StatReader(tmp_path)

    with pytest.raises(SourceUnavailable):
        reader.read_cpu_snapshot()
    with pytest.raises(SourceUnavailable):
        reader.read_memory()
    with pytest.raises(SourceUnavailable):
        reader.read_mount_table()


def test_read_memory_converts_kib_to_bytes(proc_root):
    snapshot = StatReader(proc_root).read_memory()

    assert snapshot == MemorySnapshot(
        total_bytes=8000000 * 1024,
        available_bytes=2000000 * 1024,
    )


def test_read_memory_reports_missing_field_as_zero(tmp_path):
    (tmp_path / "meminfo").write_text("MemTotal: 1000 kB\nMemFree: 10 kB\n")

    snapshot = StatReader(tmp_path).read_memory()
    assert snapshot.total_bytes == 1000 * 1024
    assert snapshot.available_bytes == 0


def test_read_memory_unparsable_value(tmp_path):
    (tmp_path / "meminfo").write_text("MemTotal: lots kB\nMemAvailable: 10 kB\n")

    with pytest.raises(MalformedData):
        StatReader(tmp_path).read_memory()


def test_read_mount_table_skips_short_rows_and_unescapes(proc_root):
    entries = StatReader(proc_root).read_mount_table()

    assert [e.mount_point for e in entries] == ["/", "/proc", "/mnt/my disk"]
    assert entries[0].device == "/dev/sda1"
    assert entries[0].fs_type == "ext4"
    assert entries[0].options == "rw,relatime"
    assert entries[1].fs_type == "proc"


def test_read_by_logical_source_name(proc_root):
    reader = StatReader(proc_root)

    assert reader.read("cpu-stats").total_ticks == 600
    assert reader.read("memory-stats").total_bytes == 8000000 * 1024
    assert len(reader.read("mount-table")) == 3

    with pytest.raises(ValueError):
        reader.read("disk-stats")


@pytest.mark.parametrize("value", ["+5", "1_000", "-3", "٣"])
def test_cpu_counters_must_be_plain_digits(tmp_path, value):
    (tmp_path / "stat").write_text(f"cpu  1 2 3 {value} 5\n", encoding="utf-8")

    with pytest.raises(MalformedData, match="invalid cpu fields"):
        StatReader(tmp_path).read_cpu_snapshot()


@pytest.mark.parametrize("value", ["+8000", "8_000", "-1"])
def test_meminfo_values_must_be_plain_digits(tmp_path, value):
    (tmp_path / "meminfo").write_text(f"MemTotal: {value} kB\nMemAvailable: 10 kB\n")

    with pytest.raises(MalformedData, match="invalid value"):
        StatReader(tmp_path).read_memory()


def test_non_utf8_mount_point_round_trips_to_the_original_bytes(tmp_path):
    (tmp_path / "self").mkdir()
    (tmp_path / "self" / "mounts").write_bytes(b"/dev/sdc1 /mnt/caf\xe9 ext4 rw 0 0\n")

    entries = StatReader(tmp_path).read_mount_table()

    assert entries[0].mount_point == os.fsdecode(b"/mnt/caf\xe9")
    assert os.fsencode(entries[0].mount_point) == b"/mnt/caf\xe9"
