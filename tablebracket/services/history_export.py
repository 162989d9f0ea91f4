from __future__ import annotations

from datetime import date
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from tablebracket.domain.models import Tournament
from tablebracket.domain.placements import compute_placements
from tablebracket.domain.rounds import find_champion

HISTORY_COLUMNS = ["Round", "Match", "Place", "Participant", "Points"]
MISSING_POINTS = "-"


def _format_points(points: int | float | None) -> str:
    if points is None:
        return MISSING_POINTS
    if isinstance(points, float) and points.is_integer():
        return str(int(points))
    return str(points)


def history_rows(tournament: Tournament) -> list[list[str]]:
    """Flatten every round into one row per seated competitor.

    Complete matches are listed in placement order with their place;
    incomplete ones keep slot order and leave the place blank.
    """
    rows: list[list[str]] = []
    for round_ in tournament.rounds:
        for match_number, match in enumerate(round_.matches, start=1):
            ranking = compute_placements(match)
            points_by_id = {
                slot.competitor.id: slot.points for slot in match.slots if slot.competitor is not None
            }
            if ranking.placements is not None:
                ordered = list(ranking.placements)
            else:
                ordered = [slot.competitor for slot in match.slots if slot.competitor is not None]
            for place, competitor in enumerate(ordered, start=1):
                rows.append(
                    [
                        round_.name,
                        str(match_number),
                        str(place) if ranking.is_complete else "",
                        competitor.name,
                        _format_points(points_by_id.get(competitor.id)),
                    ]
                )
    return rows


class HistoryExportService:
    def export_xlsx(self, tournament: Tournament, path: str | Path, title: str = "Tournament history") -> Path:
        output_path = Path(path)
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "History"

        sheet.append([title])
        sheet.append([f"Date: {self.format_date_label()}"])
        champion = find_champion(tournament)
        if champion is not None:
            sheet.append([f"Champion: {champion.name}"])

        sheet.append(HISTORY_COLUMNS)
        header_row = sheet.max_row
        for cell in sheet[header_row]:
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
            cell.alignment = Alignment(horizontal="center")
        sheet.freeze_panes = f"A{header_row + 1}"

        rows = history_rows(tournament)
        for row in rows:
            sheet.append(row)

        for index, column in enumerate(HISTORY_COLUMNS, start=1):
            longest = max([len(column), *(len(row[index - 1]) for row in rows)])
            sheet.column_dimensions[get_column_letter(index)].width = min(longest + 2, 40)

        workbook.save(output_path)
        return output_path

    @staticmethod
    def format_date_label() -> str:
        return date.today().strftime("%d.%m.%Y")

