from __future__ import annotations

from pathlib import Path

import pytest
import requests

from tablebracket.services import roster_import
from tablebracket.services.errors import RosterLoadError
from tablebracket.services.roster_import import (
    load_participants_from_file,
    load_participants_from_xlsx,
    parse_csv,
    parse_participants_csv,
)
from tests.helpers.bracket_factory import make_roster_xlsx


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200) -> None:
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


def test_parse_csv_trims_cells_and_drops_blank_rows() -> None:
    rows = parse_csv("Name, Flag\r\n Ann , a.png\n\n , \nBob,\n")
    assert rows == [["Name", "Flag"], ["Ann", "a.png"], ["Bob", ""]]


def test_header_names_are_matched_case_insensitively() -> None:
    participants = parse_participants_csv("Country,PARTICIPANT\nfr.png,Ann\nde.png,Bob\n")
    assert [(p.name, p.image) for p in participants] == [("Ann", "fr.png"), ("Bob", "de.png")]


def test_unknown_headers_fall_back_to_first_two_columns() -> None:
    participants = parse_participants_csv("Player,Image,Club\nAnn,a.png,X\nBob,,Y\n")
    assert [(p.name, p.image) for p in participants] == [("Ann", "a.png"), ("Bob", None)]


def test_rows_without_name_are_skipped_and_ids_are_unique() -> None:
    participants = parse_participants_csv("participants,countries\nAnn,fr\n,de\nAnn,fr\n")
    assert [p.name for p in participants] == ["Ann", "Ann"]
    assert participants[0].id != participants[1].id


def test_empty_text_gives_no_participants() -> None:
    assert parse_participants_csv("") == []
    assert parse_participants_csv("Name,Flag\n") == []


def test_fetch_from_url_parses_response(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, float]] = []

    def fake_get(url: str, timeout: float) -> _FakeResponse:
        calls.append((url, timeout))
        return _FakeResponse("Name,Flag\nAnn,a.png\n")

    monkeypatch.setattr(roster_import.requests, "get", fake_get)
    participants = roster_import.fetch_participants_from_url("https://example.test/roster.csv", timeout=3)

    assert [p.name for p in participants] == ["Ann"]
    assert calls == [("https://example.test/roster.csv", 3)]


@pytest.mark.parametrize(
    "failure",
    [
        lambda url, timeout: _FakeResponse("", status_code=404),
        lambda url, timeout: (_ for _ in ()).throw(requests.ConnectionError("offline")),
    ],
)
def test_fetch_failures_raise_roster_load_error(monkeypatch: pytest.MonkeyPatch, failure) -> None:
    monkeypatch.setattr(roster_import.requests, "get", failure)
    with pytest.raises(RosterLoadError):
        roster_import.fetch_participants_from_url("https://example.test/roster.csv", timeout=1)


def test_load_xlsx_roster(tmp_path: Path) -> None:
    path = make_roster_xlsx(
        tmp_path,
        ["Flag", "Name"],
        [["fr.png", "Ann"], [None, "Bob"], ["de.png", None], [None, None], ["it.png", "Cid"]],
    )
    participants = load_participants_from_xlsx(path)
    assert [(p.name, p.image) for p in participants] == [("Ann", "fr.png"), ("Bob", None), ("Cid", "it.png")]


def test_load_file_dispatches_on_extension(tmp_path: Path) -> None:
    csv_path = tmp_path / "roster.csv"
    csv_path.write_text("\ufeffName,Flag\nAnn,a.png\n", encoding="utf-8")
    xlsx_path = make_roster_xlsx(tmp_path, ["Name"], [["Bob"]])

    assert [p.name for p in load_participants_from_file(csv_path)] == ["Ann"]
    assert [p.name for p in load_participants_from_file(xlsx_path)] == ["Bob"]


def test_unreadable_files_raise_roster_load_error(tmp_path: Path) -> None:
    broken = tmp_path / "broken.xlsx"
    broken.write_text("not-an-xlsx", encoding="utf-8")
    with pytest.raises(RosterLoadError):
        load_participants_from_file(broken)
    with pytest.raises(RosterLoadError):
        load_participants_from_file(tmp_path / "missing.csv")
