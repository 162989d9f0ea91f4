from __future__ import annotations

from pathlib import Path

import pytest

from tablebracket import settings


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    for name in ("ROSTER_CSV_URL", "ROSTER_REQUEST_TIMEOUT", "ALLOW_SHORT_GROUPS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_app_data_dir_is_created(_isolated_settings: Path) -> None:
    app_dir = settings.get_app_data_dir()
    assert app_dir == _isolated_settings / settings.APP_DIR_NAME
    assert app_dir.is_dir()


def test_defaults_without_settings_file() -> None:
    assert settings.get_roster_csv_url() == settings.DEFAULT_ROSTER_CSV_URL
    assert settings.get_request_timeout() == settings.DEFAULT_REQUEST_TIMEOUT
    assert settings.get_allow_short_groups() is False


def test_saved_values_are_read_back() -> None:
    settings.set_roster_csv_url("https://example.test/roster.csv")
    settings.set_allow_short_groups(True)
    assert settings.get_roster_csv_url() == "https://example.test/roster.csv"
    assert settings.get_allow_short_groups() is True


def test_environment_overrides_settings_file(monkeypatch: pytest.MonkeyPatch) -> None:
    settings.set_roster_csv_url("https://example.test/saved.csv")
    settings.set_allow_short_groups(True)
    monkeypatch.setenv("ROSTER_CSV_URL", "https://example.test/env.csv")
    monkeypatch.setenv("ALLOW_SHORT_GROUPS", "no")
    monkeypatch.setenv("ROSTER_REQUEST_TIMEOUT", "2.5")

    assert settings.get_roster_csv_url() == "https://example.test/env.csv"
    assert settings.get_allow_short_groups() is False
    assert settings.get_request_timeout() == 2.5


@pytest.mark.parametrize("raw", ["abc", "0", "-4"])
def test_invalid_timeout_falls_back_to_default(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("ROSTER_REQUEST_TIMEOUT", raw)
    assert settings.get_request_timeout() == settings.DEFAULT_REQUEST_TIMEOUT


def test_corrupt_settings_file_is_ignored(_isolated_settings: Path) -> None:
    path = settings.get_app_data_dir() / "settings.json"
    path.write_text("[not, an, object", encoding="utf-8")
    assert settings.get_roster_csv_url() == settings.DEFAULT_ROSTER_CSV_URL
