from __future__ import annotations

import re
import zipfile
from pathlib import Path
from typing import Iterable, Sequence

import requests
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from tablebracket.domain.models import Participant
from tablebracket.services.errors import RosterLoadError
from tablebracket.settings import get_request_timeout, get_roster_csv_url

NAME_HEADER = re.compile(r"^(name|participant|participants)$", re.IGNORECASE)
IMAGE_HEADER = re.compile(r"^(flag|country|countries)$", re.IGNORECASE)

DEFAULT_NAME_COLUMN = 0
DEFAULT_IMAGE_COLUMN = 1


def parse_csv(text: str) -> list[list[str]]:
    """Split CSV text into rows of trimmed cells.

    Fields are split on commas only; quoted fields are not supported.
    Rows without any non-empty cell are dropped.
    """
    rows: list[list[str]] = []
    for line in re.split(r"\r?\n", text):
        cells = [cell.strip() for cell in line.split(",")]
        if any(cells):
            rows.append(cells)
    return rows


def _find_column(header: Sequence[str], pattern: re.Pattern[str], default: int) -> int:
    for index, value in enumerate(header):
        if pattern.match(value):
            return index
    return default


def _cell(row: Sequence[object], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def participants_from_rows(rows: Iterable[Sequence[object]]) -> list[Participant]:
    rows_list = list(rows)
    if not rows_list:
        return []
    header = [_cell(rows_list[0], index) for index in range(len(rows_list[0]))]
    name_index = _find_column(header, NAME_HEADER, DEFAULT_NAME_COLUMN)
    image_index = _find_column(header, IMAGE_HEADER, DEFAULT_IMAGE_COLUMN)

    participants: list[Participant] = []
    for row in rows_list[1:]:
        name = _cell(row, name_index)
        if not name:
            continue
        participants.append(Participant.create(name, _cell(row, image_index) or None))
    return participants


def parse_participants_csv(text: str) -> list[Participant]:
    return participants_from_rows(parse_csv(text))


def fetch_participants_from_url(url: str | None = None, timeout: float | None = None) -> list[Participant]:
    target = url or get_roster_csv_url()
    try:
        response = requests.get(target, timeout=timeout or get_request_timeout())
        response.raise_for_status()
    except requests.RequestException as exc:
        raise RosterLoadError(f"Failed to fetch CSV: {exc}") from exc
    return parse_participants_csv(response.text)


def load_participants_from_csv(path: str | Path) -> list[Participant]:
    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise RosterLoadError(f"Failed to read CSV file: {exc}") from exc
    return parse_participants_csv(text)


def load_participants_from_xlsx(path: str | Path) -> list[Participant]:
    try:
        workbook = load_workbook(str(path), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError) as exc:
        raise RosterLoadError(f"Failed to read XLSX file: {exc}") from exc
    try:
        sheet = workbook.active
        rows = [
            list(row)
            for row in sheet.iter_rows(values_only=True)
            if any(value is not None and str(value).strip() for value in row)
        ]
    finally:
        workbook.close()
    return participants_from_rows(rows)


def load_participants_from_file(path: str | Path) -> list[Participant]:
    suffix = Path(path).suffix.lower()
    if suffix in {".xlsx", ".xlsm"}:
        return load_participants_from_xlsx(path)
    return load_participants_from_csv(path)
