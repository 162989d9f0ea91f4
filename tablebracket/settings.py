from __future__ import annotations

import json
import os
from pathlib import Path

APP_DIR_NAME = "TableBracket"

DEFAULT_ROSTER_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vSac9m1rxVUX63yWLU6cOOBVGxFRhqiNctV8enmlSSB0QsrGSAh2OVCbF4kOrVwwMsf8mksijRvda6l"
    "/pub?output=csv"
)
DEFAULT_REQUEST_TIMEOUT = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


def get_app_data_dir() -> Path:
    if os.name == "nt":
        base_dir = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        root = Path(base_dir) if base_dir else Path.home() / "AppData" / "Roaming"
    else:
        root = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    app_dir = root / APP_DIR_NAME
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def _get_app_settings_path() -> Path:
    return get_app_data_dir() / "settings.json"


def _read_settings() -> dict[str, object]:
    path = _get_app_settings_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def _write_settings(data: dict[str, object]) -> None:
    path = _get_app_settings_path()
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def get_roster_csv_url() -> str:
    env_url = os.environ.get("ROSTER_CSV_URL")
    if env_url:
        return env_url
    return str(_read_settings().get("roster_csv_url") or DEFAULT_ROSTER_CSV_URL)


def set_roster_csv_url(url: str) -> None:
    settings = _read_settings()
    settings["roster_csv_url"] = url
    _write_settings(settings)


def get_request_timeout() -> float:
    raw = os.environ.get("ROSTER_REQUEST_TIMEOUT") or _read_settings().get("request_timeout")
    if raw is None:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        timeout = float(str(raw))
    except ValueError:
        return DEFAULT_REQUEST_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_REQUEST_TIMEOUT


def get_allow_short_groups() -> bool:
    env_value = os.environ.get("ALLOW_SHORT_GROUPS")
    if env_value is not None:
        return env_value.strip().lower() in _TRUE_VALUES
    value = _read_settings().get("allow_short_groups")
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE_VALUES


def set_allow_short_groups(enabled: bool) -> None:
    settings = _read_settings()
    settings["allow_short_groups"] = bool(enabled)
    _write_settings(settings)
