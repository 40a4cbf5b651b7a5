from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

from .aggregator import collect_storage_report
from .config import DEFAULT_POWERSHELL_TIMEOUT, ScanConfig
from .formatting import format_uptime
from .models import DiskOutcome
from .platform import get_disk_source, get_uptime, is_elevated
from .report import build_report, write_csv


logger = logging.getLogger(__name__)


def scan(config: ScanConfig) -> List[DiskOutcome]:
    elevated = is_elevated()
    diagnostics = config.diagnostics_enabled(elevated)
    if not diagnostics:
        logger.info("SMART diagnostics disabled (elevated=%s)", elevated)
    source = get_disk_source(timeout=config.powershell_timeout)
    return collect_storage_report(source, diagnostics, check_thresholds=config.check_thresholds)


def render_text(outcomes: Sequence[DiskOutcome]) -> str:
    lines: List[str] = []
    uptime = get_uptime()
    if uptime is not None:
        lines.append(f"Uptime: {format_uptime(uptime)}")
        lines.append("")
    if not outcomes:
        lines.append("No physical disks found.")
    for outcome in outcomes:
        dev = outcome.device
        mounts = ", ".join(dev.mount_points) if dev.mount_points else "no mount"
        lines.append(f"Disk {dev.index}: {dev.model or 'Unknown model'} ({dev.device_id})")
        lines.append(f"  Volumes: {mounts}")
        lines.append(
            f"  Size: {dev.total_size_text}  Used: {dev.used_space_text}  "
            f"Free: {dev.free_space_text}  ({dev.usage_percent}%)"
        )
        lines.append(f"  Health: {dev.health_status}  Age: {dev.age_estimate}")
        for w in dev.warnings:
            lines.append(
                f"    ! {w.attribute_name}: {w.reason} "
                f"(current {w.current}, worst {w.worst}, threshold {w.threshold})"
            )
        if outcome.error:
            lines.append(f"  Note: {outcome.error}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Physical disk usage and SMART health report")
    out = ap.add_argument_group("Output options")
    out.add_argument("--json", action="store_true", help="Output JSON only")
    out.add_argument("--csv", metavar="PATH", help="Also write the report as CSV to PATH")
    diag = ap.add_mutually_exclusive_group()
    diag.add_argument(
        "--no-diagnostics",
        dest="diagnostics",
        action="store_const",
        const=False,
        help="Skip SMART queries even when running elevated",
    )
    diag.add_argument(
        "--force-diagnostics",
        dest="diagnostics",
        action="store_const",
        const=True,
        help="Attempt SMART queries without administrator rights",
    )
    ap.add_argument(
        "--check-thresholds",
        action="store_true",
        help="Also warn when a critical attribute falls to its vendor threshold",
    )
    ap.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_POWERSHELL_TIMEOUT,
        help=f"Timeout seconds for each host query (default: {DEFAULT_POWERSHELL_TIMEOUT:g})",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = ScanConfig(
        powershell_timeout=args.timeout,
        check_thresholds=args.check_thresholds,
        diagnostics=args.diagnostics,
    )

    try:
        outcomes = scan(config)
    except Exception as exc:
        print(f"Disk scan failed: {exc}", file=sys.stderr)
        return 1

    report = build_report(outcomes)
    if args.csv:
        try:
            write_csv(report, args.csv)
        except OSError as exc:
            print(f"Export failed: {exc}", file=sys.stderr)
            return 1

    if args.json:
        sys.stdout.write(json.dumps(report, ensure_ascii=False, indent=2) + "\n")
    else:
        sys.stdout.write(render_text(outcomes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
