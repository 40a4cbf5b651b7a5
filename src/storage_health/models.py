from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .formatting import format_bytes


HEALTHY = "Healthy"
WARNING = "Warning"
UNKNOWN = "Unknown"

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class SmartAttribute:
    id: int
    current_value: int
    worst_value: int
    threshold: int
    raw_value: int


@dataclass(frozen=True)
class SmartWarning:
    attribute_id: int
    attribute_name: str
    reason: str
    current: int
    worst: int
    threshold: int


@dataclass(frozen=True)
class DiskDescriptor:
    index: int
    model: Optional[str]
    size_bytes: Optional[int]
    device_id: str
    pnp_device_id: Optional[str] = None


@dataclass(frozen=True)
class VolumeInfo:
    letter: str
    size_bytes: Optional[int] = None
    free_bytes: Optional[int] = None
    label: Optional[str] = None


@dataclass(frozen=True)
class StorageDevice:
    index: int
    model: str
    device_id: str
    mount_points: Tuple[str, ...] = ()
    total_size: int = 0
    used_space: int = 0
    free_space: int = 0
    age_estimate: str = NOT_AVAILABLE
    health_status: str = UNKNOWN
    warnings: Tuple[SmartWarning, ...] = ()
    failure_predicted: Optional[bool] = None
    attributes: Tuple[SmartAttribute, ...] = ()

    @property
    def usage_percent(self) -> float:
        if self.total_size == 0:
            return 0.0
        return round(self.used_space / self.total_size * 100, 1)

    @property
    def total_size_text(self) -> str:
        return format_bytes(self.total_size)

    @property
    def used_space_text(self) -> str:
        return format_bytes(self.used_space)

    @property
    def free_space_text(self) -> str:
        return format_bytes(self.free_space)


@dataclass(frozen=True)
class DiskOutcome:
    """Result of aggregating one disk.

    ``error`` is set when diagnostics failed and the record was degraded to
    its sentinel values; the space totals are still valid in that case.
    """

    device: StorageDevice
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
