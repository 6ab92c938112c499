# safecheck/config.py
# Settings come from the environment; a local .env file is loaded first.
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from safecheck.agents.checkin_agent import DEFAULT_ALERT_MESSAGE, DEFAULT_DURATION_MS


class ConfigError(RuntimeError):
    pass


def _get(env, key, default, cast):
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{key} has an invalid value: {raw!r}") from None


def _flag(raw: str) -> bool:
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)


@dataclass(frozen=True)
class Settings:
    telegram_token: str
    host: str = "0.0.0.0"
    port: int = 3000
    check_interval_s: float = 30
    settle_delay_s: float = 1.0
    default_duration_ms: int = DEFAULT_DURATION_MS
    arm_on_start: bool = True
    dispatch_workers: int = 4
    telegram_timeout_s: float = 6
    alert_message: str = DEFAULT_ALERT_MESSAGE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env=None, dotenv_path=None) -> "Settings":
        if env is None:
            load_dotenv(dotenv_path=dotenv_path)
            env = os.environ

        token = (env.get("TELEGRAM_BOT_TOKEN") or "").strip()
        if not token:
            raise ConfigError("TELEGRAM_BOT_TOKEN not set (environment or .env file)")

        settings = cls(
            telegram_token=token,
            host=_get(env, "HOST", cls.host, str),
            port=_get(env, "PORT", cls.port, int),
            check_interval_s=_get(env, "CHECK_INTERVAL_S", cls.check_interval_s, float),
            settle_delay_s=_get(env, "SETTLE_DELAY_S", cls.settle_delay_s, float),
            default_duration_ms=_get(env, "DEFAULT_DURATION_MS", cls.default_duration_ms, int),
            arm_on_start=_get(env, "ARM_ON_START", cls.arm_on_start, _flag),
            dispatch_workers=_get(env, "DISPATCH_WORKERS", cls.dispatch_workers, int),
            telegram_timeout_s=_get(env, "TELEGRAM_TIMEOUT_S", cls.telegram_timeout_s, float),
            alert_message=_get(env, "ALERT_MESSAGE", cls.alert_message, str),
            log_level=_get(env, "LOG_LEVEL", cls.log_level, str).upper(),
        )
        if settings.default_duration_ms <= 0:
            raise ConfigError("DEFAULT_DURATION_MS must be greater than 0")
        if settings.check_interval_s <= 0:
            raise ConfigError("CHECK_INTERVAL_S must be greater than 0")
        if not isinstance(logging.getLevelName(settings.log_level), int):
            raise ConfigError(f"LOG_LEVEL has an invalid value: {settings.log_level!r}")
        return settings
