from PySide6.QtWidgets import QMainWindow

from tablebracket.ui.tournament_view import TournamentView


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Table Bracket")
        self.setMinimumSize(1024, 640)
        self.setCentralWidget(TournamentView())
