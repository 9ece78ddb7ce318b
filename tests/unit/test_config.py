import logging
from pathlib import Path

from subshelf.config import Settings


def test_from_toml(tmp_path: Path) -> None:
    config_path = tmp_path / 'config.toml'
    config_path.write_text('relations_url = "http://mirror.test/rules.txt"\ntimeout = 5\nlog_level = "debug"\n')

    settings = Settings.from_toml(config_path)

    assert settings.relations_url == 'http://mirror.test/rules.txt'
    assert settings.timeout == 5
    assert settings.log_level == logging.DEBUG


def test_from_toml_missing_file(tmp_path: Path) -> None:
    settings = Settings.from_toml(tmp_path / 'absent.toml')
    assert settings.log_prefix == 'subshelf'
    assert settings.proxy is None


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv('SUBSHELF_API_BASE_URL', 'http://api.test')
    monkeypatch.setenv('SUBSHELF_LOG_LEVEL', 'warning')

    settings = Settings()

    assert settings.api_base_url == 'http://api.test'
    assert settings.log_level == logging.WARNING


def test_unknown_log_level_falls_back_to_info() -> None:
    assert Settings(log_level='chatty').log_level == logging.INFO
    assert Settings(log_level=logging.ERROR).log_level == logging.ERROR
