from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Optional, Sequence, Tuple

from .models import HEALTHY, NOT_AVAILABLE, UNKNOWN, WARNING, SmartAttribute, SmartWarning
from .smart import find_attribute


ATTRIBUTE_NAMES = MappingProxyType(
    {
        1: "Read Error Rate",
        5: "Reallocated Sectors Count",
        9: "Power-On Hours",
        10: "Spin Retry Count",
        184: "End-to-End Error",
        187: "Reported Uncorrectable Errors",
        188: "Command Timeout",
        196: "Reallocation Event Count",
        197: "Current Pending Sector Count",
        198: "Uncorrectable Sector Count",
        199: "UltraDMA CRC Error Count",
        200: "Write Error Rate",
        201: "Soft Read Error Rate",
    }
)

CRITICAL_ATTRIBUTES = frozenset({5, 10, 184, 187, 188, 196, 197, 198})

POWER_ON_HOURS = 9
END_TO_END_ERROR = 184


@dataclass(frozen=True)
class Classification:
    age_estimate: str
    health_status: str
    warnings: Tuple[SmartWarning, ...] = ()


def attribute_name(attr_id: int) -> str:
    return ATTRIBUTE_NAMES.get(attr_id, f"Unknown Attribute ({attr_id})")


def estimate_age(attributes: Sequence[SmartAttribute]) -> str:
    attr = find_attribute(attributes, POWER_ON_HOURS)
    if attr is None:
        return NOT_AVAILABLE
    days = attr.raw_value // 24
    years = days // 365
    if years > 0:
        return f"{years} years, {days % 365} days"
    return f"{days} days"


def _warning_reason(attr: SmartAttribute, check_thresholds: bool) -> Optional[str]:
    if attr.id not in CRITICAL_ATTRIBUTES:
        return None
    if attr.raw_value > 0:
        if attr.id == END_TO_END_ERROR:
            return f"Errors: {attr.raw_value}"
        return f"Count: {attr.raw_value} (should be 0)"
    if check_thresholds and attr.threshold > 0 and attr.current_value <= attr.threshold:
        return f"Value {attr.current_value} <= Threshold {attr.threshold}"
    return None


def evaluate_warnings(
    attributes: Sequence[SmartAttribute], check_thresholds: bool = False
) -> Tuple[SmartWarning, ...]:
    warnings: List[SmartWarning] = []
    for attr in attributes:
        reason = _warning_reason(attr, check_thresholds)
        if reason is None:
            continue
        warnings.append(
            SmartWarning(
                attribute_id=attr.id,
                attribute_name=attribute_name(attr.id),
                reason=reason,
                current=attr.current_value,
                worst=attr.worst_value,
                threshold=attr.threshold,
            )
        )
    return tuple(warnings)


def classify(
    attributes: Optional[Sequence[SmartAttribute]],
    failure_predicted: Optional[bool] = None,
    check_thresholds: bool = False,
) -> Classification:
    """Derive age, health verdict and warnings for one drive.

    ``attributes`` is ``None`` or empty when no attribute could be read, and
    ``failure_predicted`` is ``None`` when the driver exposed no prediction.
    With neither available the verdict is ``Unknown``.
    """
    if not attributes and failure_predicted is None:
        return Classification(age_estimate=NOT_AVAILABLE, health_status=UNKNOWN)

    attrs = list(attributes or [])
    warnings = evaluate_warnings(attrs, check_thresholds)
    if failure_predicted or warnings:
        status = WARNING
    else:
        status = HEALTHY
    return Classification(age_estimate=estimate_age(attrs), health_status=status, warnings=warnings)
