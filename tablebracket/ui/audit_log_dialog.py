from __future__ import annotations

from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QFileDialog,
    QHBoxLayout,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
)

from tablebracket.services.audit_log import EVENT_TYPES, AuditLogService

COLUMNS = ["Time", "Level", "Event", "Title", "Details"]
ERROR_COLOR = QColor("#f8d7da")


class AuditLogDialog(QDialog):
    def __init__(self, audit_log_service: AuditLogService, parent=None) -> None:
        super().__init__(parent)
        self._audit_log_service = audit_log_service
        self.setWindowTitle("Audit log")
        self.resize(900, 500)

        layout = QVBoxLayout(self)

        filter_row = QHBoxLayout()
        self._type_filter = QComboBox(self)
        self._type_filter.addItem("All events", "")
        for event_type in EVENT_TYPES:
            self._type_filter.addItem(event_type, event_type)
        self._type_filter.currentIndexChanged.connect(self._refresh)

        self._search_input = QLineEdit(self)
        self._search_input.setPlaceholderText("Search titles and details")
        self._search_input.textChanged.connect(self._refresh)

        self._errors_only = QCheckBox("Errors only", self)
        self._errors_only.toggled.connect(self._refresh)

        filter_row.addWidget(self._type_filter)
        filter_row.addWidget(self._search_input, 1)
        filter_row.addWidget(self._errors_only)
        layout.addLayout(filter_row)

        self._table = QTableWidget(self)
        self._table.setColumnCount(len(COLUMNS))
        self._table.setHorizontalHeaderLabels(COLUMNS)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        layout.addWidget(self._table)

        buttons_row = QHBoxLayout()
        export_btn = QPushButton("Save as TXT", self)
        export_btn.clicked.connect(self._export_log)
        close_btn = QPushButton("Close", self)
        close_btn.clicked.connect(self.accept)
        buttons_row.addWidget(export_btn)
        buttons_row.addStretch(1)
        buttons_row.addWidget(close_btn)
        layout.addLayout(buttons_row)

        self._refresh()

    def _selected_event_type(self) -> str | None:
        if self._errors_only.isChecked():
            return "ERROR"
        value = self._type_filter.currentData()
        return str(value) if value else None

    def _refresh(self) -> None:
        events = self._audit_log_service.list_events(
            event_type=self._selected_event_type(),
            query=self._search_input.text().strip(),
        )
        self._table.setRowCount(len(events))
        for row, event in enumerate(events):
            values = [event.created_at, event.level.upper(), event.event_type, event.title, event.details]
            for column, value in enumerate(values):
                item = QTableWidgetItem(value)
                if event.level == "error":
                    item.setBackground(QBrush(ERROR_COLOR))
                self._table.setItem(row, column, item)
        self._table.resizeColumnsToContents()

    def _export_log(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Save audit log", "audit_log.txt", "Text Files (*.txt)")
        if not path:
            return
        try:
            exported = self._audit_log_service.export_txt(
                path,
                event_type=self._selected_event_type(),
                query=self._search_input.text().strip(),
            )
        except OSError as exc:
            QMessageBox.critical(self, "Audit log", str(exc))
            return
        QMessageBox.information(self, "Audit log", f"Saved: {exported}")
