# tests/test_config.py
import pytest

from safecheck.agents.checkin_agent import DEFAULT_DURATION_MS
from safecheck.config import ConfigError, Settings


def test_missing_token_is_fatal():
    with pytest.raises(ConfigError):
        Settings.from_env(env={})


def test_blank_token_is_fatal():
    with pytest.raises(ConfigError):
        Settings.from_env(env={"TELEGRAM_BOT_TOKEN": "   "})


def test_defaults():
    s = Settings.from_env(env={"TELEGRAM_BOT_TOKEN": "t"})
    assert s.port == 3000
    assert s.check_interval_s == 30
    assert s.settle_delay_s == 1.0
    assert s.default_duration_ms == DEFAULT_DURATION_MS
    assert s.arm_on_start is True
    assert s.dispatch_workers == 4


def test_overrides():
    s = Settings.from_env(env={
        "TELEGRAM_BOT_TOKEN": "t",
        "PORT": "8080",
        "CHECK_INTERVAL_S": "5",
        "ARM_ON_START": "false",
        "DEFAULT_DURATION_MS": "60000",
        "LOG_LEVEL": "debug",
    })
    assert s.port == 8080
    assert s.check_interval_s == 5.0
    assert s.arm_on_start is False
    assert s.default_duration_ms == 60_000
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize("key,value", [
    ("PORT", "abc"),
    ("ARM_ON_START", "maybe"),
    ("DEFAULT_DURATION_MS", "0"),
    ("CHECK_INTERVAL_S", "-1"),
    ("LOG_LEVEL", "loud"),
])
def test_bad_values(key, value):
    with pytest.raises(ConfigError):
        Settings.from_env(env={"TELEGRAM_BOT_TOKEN": "t", key: value})
