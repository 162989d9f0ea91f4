from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QFileDialog,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from tablebracket.domain.models import Round
from tablebracket.services.audit_log import AuditLogService
from tablebracket.services.errors import TournamentError
from tablebracket.services.tournament_service import TournamentService
from tablebracket.ui.audit_log_dialog import AuditLogDialog

HIGHLIGHT_COLOR = QColor("#d9f2d9")
SLOT_ROLE = Qt.UserRole + 1


class TournamentView(QWidget):
    def __init__(self, service: TournamentService | None = None, audit_log: AuditLogService | None = None) -> None:
        super().__init__()
        self._audit_log = audit_log or AuditLogService()
        self._service = service or TournamentService(audit_log=self._audit_log)
        self._refreshing = False

        layout = QVBoxLayout(self)
        layout.addLayout(self._build_actions())

        body = QHBoxLayout()
        participants_box = QVBoxLayout()
        self.participants_label = QLabel("Participants: 0", self)
        self.participants_list = QListWidget(self)
        participants_box.addWidget(self.participants_label)
        participants_box.addWidget(self.participants_list)
        body.addLayout(participants_box, 1)

        self._rounds_container = QWidget(self)
        self._rounds_layout = QVBoxLayout(self._rounds_container)
        self._rounds_layout.addStretch(1)
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._rounds_container)
        body.addWidget(scroll, 3)
        layout.addLayout(body)

        self.refresh()

    def _build_actions(self) -> QHBoxLayout:
        actions_layout = QHBoxLayout()
        buttons = [
            ("Load sheet", self._load_sheet),
            ("Load file", self._load_file),
            ("Seed", self._seed),
            ("Compute", self._compute),
            ("Next round", self._build_next),
            ("Reset", self._reset),
            ("Export JSON", self._export_snapshot),
            ("Import JSON", self._import_snapshot),
            ("Export history", self._export_history),
            ("Audit log", self._open_audit_log),
        ]
        self._buttons: dict[str, QPushButton] = {}
        for title, handler in buttons:
            button = QPushButton(title, self)
            button.clicked.connect(handler)
            actions_layout.addWidget(button)
            self._buttons[title] = button
        actions_layout.addStretch(1)
        return actions_layout

    def refresh(self) -> None:
        tournament = self._service.tournament
        self.participants_label.setText(f"Participants: {len(tournament.participants)}")
        self.participants_list.clear()
        for participant in tournament.participants:
            self.participants_list.addItem(participant.name)

        while self._rounds_layout.count() > 1:
            item = self._rounds_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        for round_index, round_ in enumerate(tournament.rounds):
            self._rounds_layout.insertWidget(round_index, self._round_widget(round_index, round_))

        current = tournament.current_round
        self._buttons["Seed"].setEnabled(bool(tournament.participants) and not tournament.rounds)
        self._buttons["Compute"].setEnabled(current is not None)
        self._buttons["Next round"].setEnabled(current is not None and not current.is_final_table)

    def _round_widget(self, round_index: int, round_: Round) -> QGroupBox:
        suffix = " (computed)" if round_.computed else ""
        box = QGroupBox(f"{round_.name} - {len(round_.matches)} match(es){suffix}", self._rounds_container)
        box_layout = QVBoxLayout(box)
        advancers = self._service.advancer_ids(round_index)

        table = QTableWidget(box)
        table.setColumnCount(3)
        table.setHorizontalHeaderLabels(["Match", "Participant", "Points"])
        rows = [
            (match_index, slot_index, slot)
            for match_index, match in enumerate(round_.matches)
            for slot_index, slot in enumerate(match.slots)
        ]
        table.setRowCount(len(rows))
        self._refreshing = True
        for row, (match_index, slot_index, slot) in enumerate(rows):
            name = slot.competitor.name if slot.competitor is not None else ""
            points = "" if slot.points is None else str(slot.points)
            items = [QTableWidgetItem(str(match_index + 1)), QTableWidgetItem(name), QTableWidgetItem(points)]
            items[0].setFlags(Qt.ItemIsEnabled)
            items[1].setFlags(Qt.ItemIsEnabled)
            if round_.computed or slot.is_bye or slot.is_empty:
                items[2].setFlags(Qt.ItemIsEnabled)
            items[2].setData(SLOT_ROLE, (round_index, match_index, slot_index))
            if slot.competitor is not None and slot.competitor.id in advancers:
                for item in items:
                    item.setBackground(QBrush(HIGHLIGHT_COLOR))
            for column, item in enumerate(items):
                table.setItem(row, column, item)
        self._refreshing = False
        table.itemChanged.connect(self._on_points_changed)
        table.resizeColumnsToContents()
        box_layout.addWidget(table)
        return box

    def _on_points_changed(self, item: QTableWidgetItem) -> None:
        if self._refreshing:
            return
        position = item.data(SLOT_ROLE)
        if not position:
            return
        round_index, match_index, slot_index = position
        try:
            self._service.record_point(round_index, match_index, slot_index, item.text())
        except TournamentError as exc:
            QMessageBox.warning(self, "Points", str(exc))
            self.refresh()

    def _run(self, title: str, action) -> object | None:
        try:
            result = action()
        except TournamentError as exc:
            QMessageBox.warning(self, title, str(exc))
            return None
        except OSError as exc:
            QMessageBox.critical(self, title, str(exc))
            return None
        self.refresh()
        return result

    def _load_sheet(self) -> None:
        participants = self._run("Load participants", self._service.load_roster_from_url)
        if participants is not None:
            QMessageBox.information(self, "Load participants", f"Loaded: {len(participants)}")

    def _load_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Load participants",
            "",
            "Roster Files (*.csv *.xlsx)",
        )
        if not path:
            return
        self._run("Load participants", lambda: self._service.load_roster_from_file(path))

    def _seed(self) -> None:
        self._run("Seed", self._service.seed_first_round)

    def _compute(self) -> None:
        champion = self._run("Compute", self._service.compute_round)
        if champion is not None:
            QMessageBox.information(
                self,
                "Champion",
                f"Congratulations, {champion.name}!\nYou are the champion - well played!",
            )

    def _build_next(self) -> None:
        self._run("Next round", self._service.build_next_round)

    def _reset(self) -> None:
        answer = QMessageBox.question(self, "Reset", "Clear participants and rounds?")
        if answer != QMessageBox.Yes:
            return
        self._run("Reset", self._service.reset)

    def _export_snapshot(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export state",
            "tournament-state.json",
            "JSON Files (*.json)",
        )
        if not path:
            return
        exported = self._run("Export state", lambda: self._service.save_snapshot(path))
        if exported is not None:
            QMessageBox.information(self, "Export state", f"Saved: {exported}")

    def _import_snapshot(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import state", "", "JSON Files (*.json)")
        if not path:
            return
        self._run("Import state", lambda: self._service.load_snapshot(path))

    def _export_history(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Export history",
            "tournament-history.xlsx",
            "Excel Files (*.xlsx)",
        )
        if not path:
            return
        exported = self._run("Export history", lambda: self._service.export_history(path))
        if exported is not None:
            QMessageBox.information(self, "Export history", f"Saved: {exported}")

    def _open_audit_log(self) -> None:
        AuditLogDialog(self._audit_log, self).exec()
