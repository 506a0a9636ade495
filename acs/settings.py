from __future__ import annotations

import json
import os
from pathlib import Path

from acs.errors import InvalidInputError

APP_DIR_NAME = "ACS"
DB_FILENAME = "app.db"
DEFAULT_TEAM_COUNT = 2
RANKING_GROUP_KEYS = ("name", "id")
SETTING_KEYS = ("db_path", "default_team_count", "ranking_group_by")


def get_app_dir() -> Path:
    if os.name == "nt":
        base_dir = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        root = Path(base_dir) if base_dir else Path.home() / "AppData" / "Roaming"
    else:
        root = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
    app_dir = root / APP_DIR_NAME
    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def _get_app_settings_path() -> Path:
    return get_app_dir() / "settings.json"


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


def get_database_path() -> Path:
    env_path = os.environ.get("ACS_DB_PATH")
    if env_path:
        return Path(env_path)
    configured = _read_settings().get("db_path")
    if configured:
        return Path(str(configured))
    return get_app_dir() / DB_FILENAME


def get_default_team_count() -> int:
    raw = os.environ.get("ACS_DEFAULT_TEAM_COUNT") or _read_settings().get("default_team_count")
    try:
        value = int(raw) if raw is not None else DEFAULT_TEAM_COUNT
    except (TypeError, ValueError):
        return DEFAULT_TEAM_COUNT
    return value if value >= 1 else DEFAULT_TEAM_COUNT


def get_ranking_group_by() -> str:
    raw = os.environ.get("ACS_RANKING_GROUP_BY") or _read_settings().get("ranking_group_by")
    value = str(raw or "name").strip().lower()
    return value if value in RANKING_GROUP_KEYS else "name"


def current_settings() -> dict[str, object]:
    """Effective values after environment overrides."""
    return {
        "db_path": str(get_database_path()),
        "default_team_count": get_default_team_count(),
        "ranking_group_by": get_ranking_group_by(),
    }


def set_setting(key: str, value: object) -> None:
    """Validate ``value`` and store it in settings.json."""
    if key == "default_team_count":
        try:
            count = int(str(value))
        except ValueError:
            count = 0
        if count < 1:
            raise InvalidInputError("default_team_count must be a whole number of at least 1.", {"value": value})
        value = count
    elif key == "ranking_group_by":
        value = str(value).strip().lower()
        if value not in RANKING_GROUP_KEYS:
            raise InvalidInputError(
                f"ranking_group_by must be one of {', '.join(RANKING_GROUP_KEYS)}.", {"value": value}
            )
    elif key == "db_path":
        value = str(value)
    else:
        raise InvalidInputError(f"Unknown setting: {key}", {"keys": list(SETTING_KEYS)})
    settings = _read_settings()
    settings[key] = value
    _write_settings(settings)
