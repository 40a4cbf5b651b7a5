from __future__ import annotations

import logging
import sys

from PySide6 import QtCore, QtWidgets

from .cli import scan
from .config import ScanConfig
from .formatting import format_uptime
from .models import HEALTHY, WARNING
from .platform import get_uptime, is_elevated
from .report import build_report, write_csv, write_json


logger = logging.getLogger(__name__)


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, config: ScanConfig | None = None) -> None:
        super().__init__()
        self.config = config or ScanConfig()
        self.setWindowTitle("Storage Health")
        self.resize(960, 540)

        self.status_label = QtWidgets.QLabel("")
        self.scan_button = QtWidgets.QPushButton("Scan")
        self.scan_button.clicked.connect(self.scan)
        self.export_json_button = QtWidgets.QPushButton("Export JSON")
        self.export_json_button.clicked.connect(self.export_json)
        self.export_csv_button = QtWidgets.QPushButton("Export CSV")
        self.export_csv_button.clicked.connect(self.export_csv)
        self._last_report = None

        header = QtWidgets.QHBoxLayout()
        header.addWidget(self.scan_button)
        header.addWidget(self.export_json_button)
        header.addWidget(self.export_csv_button)
        header.addStretch(1)
        header.addWidget(self.status_label)

        self.tree = QtWidgets.QTreeWidget()
        self.tree.setColumnCount(9)
        self.tree.setHeaderLabels(
            [
                "Disk/Volume",
                "Model",
                "Size",
                "Used",
                "Free",
                "Usage %",
                "Age",
                "Health",
                "Notes",
            ]
        )
        self.tree.setAlternatingRowColors(True)

        root = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(root)
        layout.addLayout(header)
        layout.addWidget(self.tree)
        self.setCentralWidget(root)

        self._set_status("Ready")

    def _set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def scan(self) -> None:
        self.tree.clear()
        if not self.config.diagnostics_enabled(is_elevated()):
            self._set_status("Not elevated: SMART health unavailable")
        else:
            self._set_status("Scanning...")

        try:
            outcomes = scan(self.config)
        except Exception as exc:
            logger.exception("Disk scan failed")
            self._set_status(f"Disk scan failed: {exc}")
            return

        for outcome in outcomes:
            dev = outcome.device
            notes = "; ".join(f"{w.attribute_name}: {w.reason}" for w in dev.warnings)
            if outcome.error:
                notes = f"{notes}; {outcome.error}" if notes else outcome.error
            item = QtWidgets.QTreeWidgetItem(
                [
                    f"Disk {dev.index}",
                    dev.model,
                    dev.total_size_text,
                    dev.used_space_text,
                    dev.free_space_text,
                    f"{dev.usage_percent}",
                    dev.age_estimate,
                    dev.health_status,
                    notes or "No issues",
                ]
            )
            _apply_health_color(item, dev.health_status)
            self.tree.addTopLevelItem(item)

            for mount in dev.mount_points or ["(no mount)"]:
                vitem = QtWidgets.QTreeWidgetItem([mount, "", "", "", "", "", "", "", ""])
                item.addChild(vitem)

        self.tree.expandAll()
        self._last_report = build_report(outcomes)
        uptime = get_uptime()
        if uptime is not None:
            self._set_status(f"Done (uptime {format_uptime(uptime)})")
        else:
            self._set_status("Done")

    def export_json(self) -> None:
        if not self._last_report:
            self._set_status("Nothing to export. Run Scan first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export JSON", "storage_health_report.json", "JSON Files (*.json)"
        )
        if not path:
            return
        try:
            write_json(self._last_report, path)
            self._set_status(f"Exported: {path}")
        except OSError as exc:
            self._set_status(f"Export failed: {exc}")

    def export_csv(self) -> None:
        if not self._last_report:
            self._set_status("Nothing to export. Run Scan first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export CSV", "storage_health_report.csv", "CSV Files (*.csv)"
        )
        if not path:
            return
        try:
            write_csv(self._last_report, path)
            self._set_status(f"Exported: {path}")
        except OSError as exc:
            self._set_status(f"Export failed: {exc}")


def _apply_health_color(item: QtWidgets.QTreeWidgetItem, status: str) -> None:
    if status == WARNING:
        color = QtCore.Qt.GlobalColor.darkYellow
    elif status == HEALTHY:
        color = QtCore.Qt.GlobalColor.darkGreen
    else:
        color = QtCore.Qt.GlobalColor.gray

    for i in range(item.columnCount()):
        item.setForeground(i, color)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QtWidgets.QApplication(sys.argv)
    win = MainWindow()
    win.show()
    sys.exit(app.exec())
