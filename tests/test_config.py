import pytest
from pydantic import ValidationError

from hostprobe.config import DEFAULT_API_URL, Settings
from hostprobe.errors import ConfigError
from hostprobe.services.disk_scanner import DEFAULT_FSTYPE_EXCLUDE

BASE_ENV = {"API_TOKEN": "secret", "CHAT_ID": "-100123"}


def test_settings_from_env_defaults():
    settings = Settings.from_env(BASE_ENV)

    assert settings.api_url == DEFAULT_API_URL
    assert settings.api_token == "secret"
    assert settings.chat_id == "-100123"
    assert settings.message_thread_id is None
    assert settings.cpu_threshold == 80.0
    assert settings.ram_threshold == 80.0
    assert settings.disk_threshold == 80.0
    assert settings.cpu_sample_interval == pytest.approx(0.3)
    assert settings.disk_fstype_exclude == DEFAULT_FSTYPE_EXCLUDE
    assert settings.log_level == "INFO"


def test_settings_from_process_environment(monkeypatch):
    monkeypatch.setenv("API_TOKEN", " tok ")
    monkeypatch.setenv("CHAT_ID", "42")
    monkeypatch.setenv("MESSAGE_THREAD_ID", "7")
    monkeypatch.setenv("API_URL", "http://alerts.local/send")

    settings = Settings.from_env()
    assert settings.api_token == "tok"
    assert settings.chat_id == "42"
    assert settings.message_thread_id == "7"
    assert settings.api_url == "http://alerts.local/send"


@pytest.mark.parametrize("missing", ["API_TOKEN", "CHAT_ID"])
def test_missing_required_setting_raises_config_error(missing):
    env = dict(BASE_ENV)
    env[missing] = "   "

    with pytest.raises(ConfigError, match=missing):
        Settings.from_env(env)


def test_thresholds_parse_and_fall_back_on_garbage():
    env = dict(
        BASE_ENV,
        CPU_THRESHOLD="90.5",
        RAM_THRESHOLD="eighty",
        DISK_THRESHOLD="nan",
    )
    settings = Settings.from_env(env)

    assert settings.cpu_threshold == 90.5
    assert settings.ram_threshold == 80.0
    assert settings.disk_threshold == 80.0


def test_sample_interval_and_fstype_exclude_from_env():
    env = dict(
        BASE_ENV,
        CPU_SAMPLE_INTERVAL_MS="50",
        DISK_FSTYPE_EXCLUDE="tmpfs, nfs4,,overlay",
        LOG_LEVEL="debug",
    )
    settings = Settings.from_env(env)

    assert settings.cpu_sample_interval == pytest.approx(0.05)
    assert settings.disk_fstype_exclude == frozenset({"tmpfs", "nfs4", "overlay"})
    assert settings.log_level == "DEBUG"


def test_unknown_log_level_falls_back_to_info():
    settings = Settings.from_env(dict(BASE_ENV, LOG_LEVEL="chatty"))
    assert settings.log_level == "INFO"


def test_settings_are_immutable():
    settings = Settings.from_env(BASE_ENV)
    with pytest.raises(ValidationError):
        settings.cpu_threshold = 10.0
