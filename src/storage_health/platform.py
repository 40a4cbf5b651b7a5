from __future__ import annotations

import json
import logging
import os
import platform
import shutil
import subprocess
from datetime import timedelta
from typing import Any, Dict, List, Optional

from .config import DEFAULT_POWERSHELL_TIMEOUT
from .models import DiskDescriptor, VolumeInfo


logger = logging.getLogger(__name__)


class CollectorError(RuntimeError):
    """A host query ran but its output could not be used."""


def _run_powershell_json(cmd: str, timeout: float = DEFAULT_POWERSHELL_TIMEOUT) -> Any:
    ps_cmd = ["powershell", "-NoProfile", "-Command", cmd]
    try:
        proc = subprocess.run(ps_cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        raise CollectorError(f"PowerShell timed out after {timeout:g}s") from exc
    if not proc.stdout.strip():
        raise RuntimeError(proc.stderr.strip() or "PowerShell returned no output")
    try:
        return json.loads(proc.stdout)
    except json.JSONDecodeError as exc:
        raise CollectorError(f"PowerShell returned non-JSON output: {exc}") from exc


def _as_list(data: Any) -> List[Dict[str, Any]]:
    # ConvertTo-Json emits a bare object when there is a single result
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    return [d for d in data if isinstance(d, dict)]


class WindowsDiskSource:
    """Disk, partition, volume and SMART data from CIM classes.

    Each class is queried once per source; lookups are served from the
    cached results.
    """

    def __init__(self, timeout: float = DEFAULT_POWERSHELL_TIMEOUT) -> None:
        self.timeout = timeout
        self._partition_map: Optional[Dict[str, List[str]]] = None
        self._volume_map: Optional[Dict[str, List[VolumeInfo]]] = None
        self._smart_data: Optional[Dict[str, Any]] = None
        self._smart_status: Optional[Dict[str, bool]] = None

    def _query(self, cmd: str) -> List[Dict[str, Any]]:
        return _as_list(_run_powershell_json(cmd, timeout=self.timeout))

    def _optional_query(self, cmd: str) -> List[Dict[str, Any]]:
        try:
            return self._query(cmd)
        except RuntimeError as exc:
            logger.debug("Optional query failed: %s", exc)
            return []

    def disks(self) -> List[DiskDescriptor]:
        rows = self._query(
            "Get-CimInstance Win32_DiskDrive | "
            "Select-Object Index,Model,Size,DeviceID,PNPDeviceID | ConvertTo-Json -Depth 3"
        )
        result: List[DiskDescriptor] = []
        for d in rows:
            device_id = d.get("DeviceID")
            if not device_id:
                continue
            result.append(
                DiskDescriptor(
                    index=int(d.get("Index") or 0),
                    model=d.get("Model"),
                    size_bytes=d.get("Size"),
                    device_id=str(device_id),
                    pnp_device_id=d.get("PNPDeviceID"),
                )
            )
        result.sort(key=lambda disk: disk.index)
        return result

    def partitions(self, disk: DiskDescriptor) -> List[str]:
        if self._partition_map is None:
            rows = self._optional_query(
                "Get-CimInstance Win32_DiskDriveToDiskPartition | "
                "Select-Object @{n='Disk';e={$_.Antecedent.DeviceID}},"
                "@{n='Partition';e={$_.Dependent.DeviceID}} | ConvertTo-Json -Depth 3"
            )
            mapping: Dict[str, List[str]] = {}
            for row in rows:
                disk_id = row.get("Disk")
                part_id = row.get("Partition")
                if not disk_id or not part_id:
                    continue
                mapping.setdefault(str(disk_id).upper(), []).append(str(part_id))
            self._partition_map = mapping
        return list(self._partition_map.get(disk.device_id.upper(), []))

    def volumes(self, partition_id: str) -> List[VolumeInfo]:
        if self._volume_map is None:
            links = self._optional_query(
                "Get-CimInstance Win32_LogicalDiskToPartition | "
                "Select-Object @{n='Partition';e={$_.Antecedent.DeviceID}},"
                "@{n='Volume';e={$_.Dependent.DeviceID}} | ConvertTo-Json -Depth 3"
            )
            logical = self._optional_query(
                "Get-CimInstance Win32_LogicalDisk | "
                "Select-Object DeviceID,VolumeName,Size,FreeSpace | ConvertTo-Json -Depth 3"
            )
            vol_info: Dict[str, VolumeInfo] = {}
            for v in logical:
                letter = v.get("DeviceID")
                if not letter:
                    continue
                vol_info[str(letter).upper()] = VolumeInfo(
                    letter=str(letter),
                    size_bytes=v.get("Size"),
                    free_bytes=v.get("FreeSpace"),
                    label=v.get("VolumeName"),
                )
            mapping: Dict[str, List[VolumeInfo]] = {}
            for link in links:
                part_id = link.get("Partition")
                letter = link.get("Volume")
                if not part_id or not letter:
                    continue
                vi = vol_info.get(str(letter).upper())
                if vi is None:
                    logger.debug("Volume %s has no logical disk entry", letter)
                    continue
                mapping.setdefault(str(part_id), []).append(vi)
            self._volume_map = mapping
        return list(self._volume_map.get(partition_id, []))

    def _match_instance(self, table: Dict[str, Any], disk: DiskDescriptor) -> Any:
        # InstanceName is the PNP device id with an "_0" style suffix
        pnp = (disk.pnp_device_id or "").upper()
        if not pnp:
            return None
        for name, value in table.items():
            if name.rsplit("_", 1)[0] == pnp:
                return value
        return None

    def vendor_block(self, disk: DiskDescriptor) -> Optional[bytes]:
        if self._smart_data is None:
            rows = self._optional_query(
                "Get-CimInstance -Namespace root\\wmi -ClassName MSStorageDriver_FailurePredictData "
                "-ErrorAction Stop | Select-Object InstanceName,VendorSpecific | ConvertTo-Json -Depth 3"
            )
            self._smart_data = {
                str(r.get("InstanceName", "")).upper(): r.get("VendorSpecific")
                for r in rows
                if r.get("InstanceName")
            }
        data = self._match_instance(self._smart_data, disk)
        if not data:
            return None
        return bytes(int(b) & 0xFF for b in data)

    def failure_predicted(self, disk: DiskDescriptor) -> Optional[bool]:
        if self._smart_status is None:
            rows = self._optional_query(
                "Get-CimInstance -Namespace root\\wmi -ClassName MSStorageDriver_FailurePredictStatus "
                "-ErrorAction Stop | Select-Object InstanceName,PredictFailure | ConvertTo-Json -Depth 3"
            )
            self._smart_status = {
                str(r.get("InstanceName", "")).upper(): bool(r.get("PredictFailure"))
                for r in rows
                if r.get("InstanceName")
            }
        return self._match_instance(self._smart_status, disk)


class LinuxDiskSource:
    """Disks and mounted filesystems from ``lsblk``.

    The kernel exposes no SMART attribute block here, so health stays
    ``Unknown`` for every disk.
    """

    def __init__(self) -> None:
        self._tree: Optional[List[Dict[str, Any]]] = None
        self._children: Dict[str, List[Dict[str, Any]]] = {}
        self._nodes: Dict[str, Dict[str, Any]] = {}

    def _load(self) -> List[Dict[str, Any]]:
        if self._tree is None:
            cmd = ["lsblk", "-J", "-b", "-o", "NAME,TYPE,SIZE,MOUNTPOINT,MODEL"]
            proc = subprocess.run(cmd, capture_output=True, text=True)
            if not proc.stdout.strip():
                raise RuntimeError(proc.stderr.strip() or "lsblk returned no output")
            try:
                data = json.loads(proc.stdout)
            except json.JSONDecodeError as exc:
                raise CollectorError(f"lsblk returned non-JSON output: {exc}") from exc
            self._tree = data.get("blockdevices", []) or []
        return self._tree

    def disks(self) -> List[DiskDescriptor]:
        result: List[DiskDescriptor] = []
        for dev in self._load():
            if dev.get("type") != "disk":
                continue
            device = f"/dev/{dev.get('name')}"
            self._children[device] = list(dev.get("children", []) or [])
            result.append(
                DiskDescriptor(
                    index=len(result),
                    model=(dev.get("model") or "").strip() or None,
                    size_bytes=_int_or_none(dev.get("size")),
                    device_id=device,
                )
            )
        return result

    def partitions(self, disk: DiskDescriptor) -> List[str]:
        parts: List[str] = []
        for child in self._children.get(disk.device_id, []):
            if child.get("type") != "part":
                continue
            name = f"/dev/{child.get('name')}"
            self._nodes[name] = child
            parts.append(name)
        return parts

    def volumes(self, partition_id: str) -> List[VolumeInfo]:
        node = self._nodes.get(partition_id)
        if not node:
            return []
        mp = node.get("mountpoint")
        if not mp:
            return []
        try:
            usage = shutil.disk_usage(mp)
        except OSError as exc:
            logger.debug("Cannot stat %s: %s", mp, exc)
            return []
        return [VolumeInfo(letter=mp, size_bytes=usage.total, free_bytes=usage.free)]

    def vendor_block(self, disk: DiskDescriptor) -> Optional[bytes]:
        return None

    def failure_predicted(self, disk: DiskDescriptor) -> Optional[bool]:
        return None


def _int_or_none(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_disk_source(timeout: float = DEFAULT_POWERSHELL_TIMEOUT):
    system = platform.system()
    if system == "Windows":
        return WindowsDiskSource(timeout=timeout)
    if system == "Linux":
        return LinuxDiskSource()
    raise RuntimeError(f"Unsupported OS: {system}")


def is_elevated() -> bool:
    if platform.system() == "Windows":
        try:
            import ctypes

            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def get_uptime() -> Optional[timedelta]:
    system = platform.system()
    if system == "Linux":
        try:
            with open("/proc/uptime", "r", encoding="utf-8") as f:
                return timedelta(seconds=float(f.read().split()[0]))
        except (OSError, ValueError, IndexError):
            return None
    if system == "Windows":
        try:
            import ctypes

            tick_count = ctypes.windll.kernel32.GetTickCount64
            tick_count.restype = ctypes.c_ulonglong
            return timedelta(milliseconds=tick_count())
        except (AttributeError, OSError):
            return None
    return None
