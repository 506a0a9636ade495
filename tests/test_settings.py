from pathlib import Path

import pytest

from acs import settings
from acs.errors import InvalidInputError


def test_defaults_without_settings_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    for name in ("ACS_DB_PATH", "ACS_DEFAULT_TEAM_COUNT", "ACS_RANKING_GROUP_BY"):
        monkeypatch.delenv(name, raising=False)

    assert settings.get_database_path() == tmp_path / "ACS" / "app.db"
    assert settings.get_default_team_count() == 2
    assert settings.get_ranking_group_by() == "name"


def test_settings_file_and_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    for name in ("ACS_DB_PATH", "ACS_DEFAULT_TEAM_COUNT", "ACS_RANKING_GROUP_BY"):
        monkeypatch.delenv(name, raising=False)

    settings.set_setting("default_team_count", 4)
    settings.set_setting("ranking_group_by", "id")
    assert settings.get_default_team_count() == 4
    assert settings.get_ranking_group_by() == "id"

    monkeypatch.setenv("ACS_DEFAULT_TEAM_COUNT", "3")
    monkeypatch.setenv("ACS_RANKING_GROUP_BY", "bogus")
    monkeypatch.setenv("ACS_DB_PATH", str(tmp_path / "other.db"))
    assert settings.get_default_team_count() == 3
    assert settings.get_ranking_group_by() == "name"
    assert settings.get_database_path() == tmp_path / "other.db"


def test_invalid_team_count_setting_falls_back(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    monkeypatch.setenv("ACS_DEFAULT_TEAM_COUNT", "zero")
    assert settings.get_default_team_count() == 2


def test_set_setting_rejects_bad_values(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    for name in ("ACS_DB_PATH", "ACS_DEFAULT_TEAM_COUNT", "ACS_RANKING_GROUP_BY"):
        monkeypatch.delenv(name, raising=False)

    for key, value in [
        ("default_team_count", "0"),
        ("default_team_count", "two"),
        ("ranking_group_by", "team"),
        ("theme", "dark"),
    ]:
        with pytest.raises(InvalidInputError):
            settings.set_setting(key, value)
    assert not (tmp_path / "ACS" / "settings.json").exists()

    settings.set_setting("default_team_count", "5")
    settings.set_setting("ranking_group_by", " ID ")
    assert settings.current_settings() == {
        "db_path": str(tmp_path / "ACS" / "app.db"),
        "default_team_count": 5,
        "ranking_group_by": "id",
    }
