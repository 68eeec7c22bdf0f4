from pydantic import BaseModel, Field


class CPUSnapshot(BaseModel):
    """Cumulative CPU tick counters read at one point in time."""

    idle_ticks: int = Field(
        ...,
        ge=0,
        description="Ticks spent idle or waiting on I/O since boot",
    )
    total_ticks: int = Field(
        ...,
        ge=0,
        description="Sum of all tick counters since boot",
    )


class MemorySnapshot(BaseModel):
    """Memory totals from the kernel; 0 means the counter was not reported."""

    total_bytes: int = Field(default=0, ge=0, description="MemTotal in bytes")
    available_bytes: int = Field(default=0, ge=0, description="MemAvailable in bytes")


class MountEntry(BaseModel):
    """One row of the mount table."""

    device: str = Field(..., description="Mounted device or pseudo source, e.g. /dev/sda1")
    mount_point: str = Field(..., description="Attachment path, e.g. /var")
    fs_type: str = Field(..., description="Filesystem type, e.g. ext4")
    options: str = Field(default="", description="Comma-separated mount options")


class DiskUsage(BaseModel):
    """Usage of a single mounted filesystem."""

    mount_point: str = Field(..., description="Filesystem attachment path")
    used_percent: float = Field(
        ...,
        ge=0,
        le=100,
        description="Used space in percent of the total size",
    )
    used_bytes: int = Field(..., ge=0)
    available_bytes: int = Field(
        ...,
        ge=0,
        description="Bytes available to unprivileged users",
    )
    total_bytes: int = Field(..., gt=0)


class MountReadError(BaseModel):
    """A mount whose statistics were readable but inconsistent."""

    mount_point: str = Field(..., description="Filesystem attachment path")
    error: str = Field(..., description="Why the mount's usage could not be computed")
