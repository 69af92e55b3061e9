from __future__ import annotations

import configparser

import pytest

from feedtools.exceptions import ConfigurationError
from feedtools.models.config import DEFAULT_STORE_SEARCH_URL, PipelineConfig
from feedtools.storage.config_manager import ConfigManager


def test_missing_file_uses_defaults(tmp_path):
    config = ConfigManager(tmp_path / "config.ini").load_config()

    assert config.staging_dir == "downloads"
    assert config.store_search_url == DEFAULT_STORE_SEARCH_URL
    assert config.search_timeout == 15
    assert config.archive_timeout == 30
    assert config.config_path == str(tmp_path)


def test_saved_defaults_load_back(tmp_path):
    path = tmp_path / "feedtools" / "config.ini"
    manager = ConfigManager(path)

    manager.save_new_config({"search_limit": 7, "json_log": True})
    config = ConfigManager(path).load_config()

    assert config.search_limit == 7
    assert config.json_log is True
    expected = PipelineConfig(search_limit=7, json_log=True, config_path=str(path.parent))
    assert config == expected


def test_cli_options_override_file(tmp_path):
    path = tmp_path / "config.ini"
    ConfigManager(path).save_new_config({"install_root": "D:/Steam"})

    config = ConfigManager(path).load_config({"install_root": "E:/Steam"})

    assert config.install_root == "E:/Steam"


@pytest.mark.parametrize(
    "settings",
    [
        {"search_timeout": 0},
        {"post_close_delay": -1},
        {"search_limit": 500},
        {"archive_base_url": "ftp://example.com/"},
        {"staging_dir": "   "},
    ],
)
def test_invalid_values_are_rejected(tmp_path, settings):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "config.ini").save_new_config(settings)
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "missing.ini").load_config(settings)


def test_unparseable_number_is_rejected(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nsearch_timeout = soon\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(path).load_config()


def test_missing_keys_are_migrated(tmp_path):
    path = tmp_path / "config.ini"
    path.write_text("[DEFAULT]\nsearch_limit = 3\n", encoding="utf-8")

    config = ConfigManager(path).load_config()

    parser = configparser.ConfigParser(interpolation=None)
    parser.read(path, encoding="utf-8")
    assert config.search_limit == 3
    assert parser["DEFAULT"]["search_limit"] == "3"
    assert set(parser["DEFAULT"]) == PipelineConfig.get_ini_keys()
