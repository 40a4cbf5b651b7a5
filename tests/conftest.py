from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from storage_health.models import DiskDescriptor, VolumeInfo


def _record(attr_id, threshold=0, current=100, worst=100, raw=0, raw_high=0):
    raw_bytes = raw.to_bytes(4, "little") + raw_high.to_bytes(2, "little")
    return bytes([attr_id, 0x32, threshold, current, worst]) + raw_bytes + b"\x00"


@pytest.fixture
def smart_record():
    """Build one 12 byte attribute record."""
    return _record


@pytest.fixture
def smart_block():
    """Build a vendor block from ``(id, threshold, current, worst, raw)`` tuples."""

    def build(*records, header=b"\x10\x00"):
        return header + b"".join(_record(*r) for r in records)

    return build


class FakeDiskSource:
    def __init__(
        self,
        disks: List[DiskDescriptor],
        partitions: Optional[Dict[str, List[str]]] = None,
        volumes: Optional[Dict[str, List[VolumeInfo]]] = None,
        blocks: Optional[Dict[str, bytes]] = None,
        predictions: Optional[Dict[str, bool]] = None,
        broken: Optional[set] = None,
    ) -> None:
        self._disks = disks
        self._partitions = partitions or {}
        self._volumes = volumes or {}
        self._blocks = blocks or {}
        self._predictions = predictions or {}
        self._broken = broken or set()
        self.smart_calls = 0

    def disks(self):
        return list(self._disks)

    def partitions(self, disk):
        return self._partitions.get(disk.device_id, [])

    def volumes(self, partition_id):
        return self._volumes.get(partition_id, [])

    def vendor_block(self, disk):
        self.smart_calls += 1
        if disk.device_id in self._broken:
            raise RuntimeError("Access denied")
        return self._blocks.get(disk.device_id)

    def failure_predicted(self, disk):
        return self._predictions.get(disk.device_id)


@pytest.fixture
def fake_source():
    return FakeDiskSource


@pytest.fixture
def disk():
    return DiskDescriptor(
        index=0,
        model="Samsung SSD 860 EVO 500GB",
        size_bytes=500,
        device_id="\\\\.\\PHYSICALDRIVE0",
        pnp_device_id="SCSI\\DISK&VEN_&PROD_SAMSUNG\\4&1",
    )
