from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


DEFAULT_POWERSHELL_TIMEOUT = 60.0


@dataclass
class ScanConfig:
    powershell_timeout: float = DEFAULT_POWERSHELL_TIMEOUT
    # enables the "value <= vendor threshold" rule; when off only raw counters warn
    check_thresholds: bool = False
    # None follows the privilege check, True/False forces SMART queries on/off
    diagnostics: Optional[bool] = None

    def diagnostics_enabled(self, elevated: bool) -> bool:
        if self.diagnostics is None:
            return elevated
        return self.diagnostics
