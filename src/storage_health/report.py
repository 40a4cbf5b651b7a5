from __future__ import annotations

import csv
import json
from typing import Any, Dict, List, Sequence

from .models import DiskOutcome


CSV_COLUMNS = [
    "index",
    "device_id",
    "model",
    "mount_points",
    "total_size",
    "used_space",
    "free_space",
    "usage_percent",
    "age_estimate",
    "health_status",
    "failure_predicted",
    "warning_attribute",
    "warning_reason",
    "warning_current",
    "warning_worst",
    "warning_threshold",
    "notes",
]


def device_report(outcome: DiskOutcome) -> Dict[str, Any]:
    dev = outcome.device
    return {
        "index": dev.index,
        "device_id": dev.device_id,
        "model": dev.model,
        "mount_points": list(dev.mount_points),
        "total_size": dev.total_size,
        "used_space": dev.used_space,
        "free_space": dev.free_space,
        "total_size_text": dev.total_size_text,
        "used_space_text": dev.used_space_text,
        "free_space_text": dev.free_space_text,
        "usage_percent": dev.usage_percent,
        "age_estimate": dev.age_estimate,
        "health_status": dev.health_status,
        "failure_predicted": dev.failure_predicted,
        "warnings": [
            {
                "attribute_id": w.attribute_id,
                "attribute": w.attribute_name,
                "reason": w.reason,
                "current": w.current,
                "worst": w.worst,
                "threshold": w.threshold,
            }
            for w in dev.warnings
        ],
        "attributes": [
            {
                "id": a.id,
                "current": a.current_value,
                "worst": a.worst_value,
                "threshold": a.threshold,
                "raw": a.raw_value,
            }
            for a in dev.attributes
        ],
        "notes": outcome.error,
    }


def build_report(outcomes: Sequence[DiskOutcome]) -> List[Dict[str, Any]]:
    return [device_report(o) for o in outcomes]


def write_json(report: List[Dict[str, Any]], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, ensure_ascii=False, indent=2)


def write_csv(report: List[Dict[str, Any]], path: str) -> None:
    """One row per warning; disks without warnings get a single row."""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for d in report:
            warnings = d.get("warnings") or [None]
            for w in warnings:
                writer.writerow(
                    [
                        d.get("index"),
                        d.get("device_id"),
                        d.get("model"),
                        ";".join(d.get("mount_points") or []),
                        d.get("total_size"),
                        d.get("used_space"),
                        d.get("free_space"),
                        d.get("usage_percent"),
                        d.get("age_estimate"),
                        d.get("health_status"),
                        d.get("failure_predicted"),
                        (w or {}).get("attribute"),
                        (w or {}).get("reason"),
                        (w or {}).get("current"),
                        (w or {}).get("worst"),
                        (w or {}).get("threshold"),
                        d.get("notes"),
                    ]
                )
