from pathlib import Path

from tablebracket.db.database import get_connection
from tablebracket.services.audit_log import BUILD_ROUND, ERROR, LOAD_ROSTER, AuditLogService
from tablebracket.services.errors import BuildBlockedError


def test_log_event_writes_and_filters_records(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "app.db")
    service = AuditLogService(connection)

    service.log_event(LOAD_ROSTER, "Roster loaded", "Sheet A", context={"count": 12})
    service.log_event(BUILD_ROUND, "Semifinal built", "Round B", level="warning", context={"rule": "form_semifinal"})

    all_events = service.list_events()
    assert len(all_events) == 2
    assert all_events[0].event_type == BUILD_ROUND

    roster_events = service.list_events(event_type=LOAD_ROSTER)
    assert len(roster_events) == 1
    assert roster_events[0].details == "Sheet A"
    assert roster_events[0].context == {"count": 12}

    search_events = service.list_events(query="Round B")
    assert len(search_events) == 1
    assert search_events[0].level == "warning"


def test_log_error_records_error_class(tmp_path: Path) -> None:
    service = AuditLogService(get_connection(tmp_path / "app.db"))
    service.log_error("Build failed", BuildBlockedError("Compute the current round first."), context={"round": 1})

    event = service.list_events(event_type=ERROR)[0]
    assert event.level == "error"
    assert event.details == "Compute the current round first."
    assert event.context == {"error": "BuildBlockedError", "round": 1}


def test_export_log_creates_txt_file(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "app.db")
    service = AuditLogService(connection)

    service.log_event(LOAD_ROSTER, "Roster loaded", "Loaded roster.csv")
    output_path = service.export_txt(tmp_path / "audit.txt")

    assert output_path.exists()
    content = output_path.read_text(encoding="utf-8")
    assert "LOAD_ROSTER" in content
    assert "Loaded roster.csv" in content


def test_connection_holds_only_the_audit_log_table(tmp_path: Path) -> None:
    connection = get_connection(tmp_path / "app.db")
    tables = connection.execute("SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'").fetchall()
    assert [row["name"] for row in tables] == ["audit_log"]
    assert connection.execute("PRAGMA foreign_keys").fetchone()[0] == 0
