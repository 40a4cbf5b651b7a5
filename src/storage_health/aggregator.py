from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence, Tuple

from .models import (
    NOT_AVAILABLE,
    UNKNOWN,
    DiskDescriptor,
    DiskOutcome,
    SmartAttribute,
    SmartWarning,
    StorageDevice,
    VolumeInfo,
)
from .rules import classify
from .smart import decode_attributes


logger = logging.getLogger(__name__)

PartitionLookup = Callable[[DiskDescriptor], Sequence[str]]
VolumeLookup = Callable[[str], Sequence[VolumeInfo]]


class SmartSource(Protocol):
    def vendor_block(self, disk: DiskDescriptor) -> Optional[bytes]: ...

    def failure_predicted(self, disk: DiskDescriptor) -> Optional[bool]: ...


class DiskSource(SmartSource, Protocol):
    def disks(self) -> List[DiskDescriptor]: ...

    def partitions(self, disk: DiskDescriptor) -> List[str]: ...

    def volumes(self, partition_id: str) -> List[VolumeInfo]: ...


def _resolve_volumes(
    disk: DiskDescriptor, partition_lookup: PartitionLookup, volume_lookup: VolumeLookup
) -> List[VolumeInfo]:
    try:
        partitions = list(partition_lookup(disk) or [])
    except Exception as exc:
        logger.debug("Partition lookup failed for %s: %s", disk.device_id, exc)
        return []

    volumes: List[VolumeInfo] = []
    for partition in partitions:
        try:
            resolved = volume_lookup(partition) or []
        except Exception as exc:
            logger.debug("Volume lookup failed for %s: %s", partition, exc)
            continue
        volumes.extend(resolved)
    return volumes


def aggregate(
    disk: DiskDescriptor,
    partition_lookup: PartitionLookup,
    volume_lookup: VolumeLookup,
    diagnostics_available: bool,
    smart_source: Optional[SmartSource] = None,
    check_thresholds: bool = False,
) -> DiskOutcome:
    """Build the report record for one physical disk.

    Space totals come from whichever volumes resolve; the SMART block is only
    read when ``diagnostics_available`` is set. A failure while reading it
    degrades this disk's health fields and is reported on the outcome.
    """
    volumes = _resolve_volumes(disk, partition_lookup, volume_lookup)
    used = 0
    free = 0
    mount_points: List[str] = []
    for vol in volumes:
        # a volume without a reported size cannot be accounted for
        if vol.size_bytes is None:
            logger.debug("Volume %s on %s has no size, skipped", vol.letter, disk.device_id)
            continue
        mount_points.append(vol.letter)
        vol_free = min(vol.free_bytes or 0, vol.size_bytes)
        used += vol.size_bytes - vol_free
        free += vol_free

    age = NOT_AVAILABLE
    status = UNKNOWN
    warnings: Tuple[SmartWarning, ...] = ()
    attributes: Tuple[SmartAttribute, ...] = ()
    predicted = None
    error = None
    if diagnostics_available and smart_source is not None:
        try:
            block = smart_source.vendor_block(disk)
            decoded = decode_attributes(block) if block is not None else None
            predicted = smart_source.failure_predicted(disk)
            result = classify(decoded, predicted, check_thresholds=check_thresholds)
        except Exception as exc:
            error = f"SMART diagnostics unavailable: {exc}"
            logger.warning("Disk %s: %s", disk.device_id, error)
            predicted = None
        else:
            age = result.age_estimate
            status = result.health_status
            warnings = result.warnings
            attributes = tuple(decoded or ())

    device = StorageDevice(
        index=disk.index,
        model=disk.model or "",
        device_id=disk.device_id,
        mount_points=tuple(mount_points),
        total_size=int(disk.size_bytes or 0),
        used_space=used,
        free_space=free,
        age_estimate=age,
        health_status=status,
        warnings=warnings,
        failure_predicted=predicted,
        attributes=attributes,
    )
    return DiskOutcome(device=device, error=error)


def collect_storage_report(
    source: DiskSource,
    diagnostics_available: bool,
    check_thresholds: bool = False,
) -> List[DiskOutcome]:
    outcomes: List[DiskOutcome] = []
    for disk in source.disks():
        try:
            outcome = aggregate(
                disk,
                source.partitions,
                source.volumes,
                diagnostics_available,
                smart_source=source,
                check_thresholds=check_thresholds,
            )
        except Exception as exc:
            logger.warning("Disk %s could not be aggregated: %s", disk.device_id, exc)
            outcome = DiskOutcome(
                device=StorageDevice(index=disk.index, model=disk.model or "", device_id=disk.device_id),
                error=str(exc),
            )
        outcomes.append(outcome)
    return outcomes
