# safecheck/utils/helpers.py
import time
from datetime import datetime


def now_ms() -> int:
    return int(time.time() * 1000)


def fmt_ts(ms):
    if ms is None:
        return "unarmed"
    return datetime.fromtimestamp(ms / 1000).isoformat(sep=" ", timespec="seconds")


def fmt_minutes(ms) -> str:
    return f"{ms / 60000:g} minutes"


def hms_to_ms(hours=0, minutes=0, seconds=0) -> int:
    return int(round(((hours or 0) * 3600 + (minutes or 0) * 60 + (seconds or 0)) * 1000))
