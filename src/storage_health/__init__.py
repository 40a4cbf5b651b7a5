"""Physical disk usage and SMART health reporting."""

from .models import (
    DiskDescriptor,
    DiskOutcome,
    SmartAttribute,
    SmartWarning,
    StorageDevice,
    VolumeInfo,
)
from .formatting import format_bytes, format_uptime
from .smart import decode_attributes
from .rules import ATTRIBUTE_NAMES, Classification, classify
from .aggregator import aggregate, collect_storage_report
from .platform import get_disk_source, is_elevated

__all__ = [
    "DiskDescriptor",
    "DiskOutcome",
    "SmartAttribute",
    "SmartWarning",
    "StorageDevice",
    "VolumeInfo",
    "format_bytes",
    "format_uptime",
    "decode_attributes",
    "ATTRIBUTE_NAMES",
    "Classification",
    "classify",
    "aggregate",
    "collect_storage_report",
    "get_disk_source",
    "is_elevated",
]
