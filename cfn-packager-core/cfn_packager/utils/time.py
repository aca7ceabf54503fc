import threading
from datetime import datetime, timezone
from typing import Optional

_last_millis = 0
_millis_lock = threading.Lock()


def mktime(ts: datetime, millis: bool = False) -> int:
    if millis:
        return int(ts.timestamp() * 1000)
    return int(ts.timestamp())


def now(millis: bool = False, tz: Optional[timezone] = None) -> int:
    return mktime(datetime.now(tz=tz), millis=millis)


def now_utc(millis: bool = False) -> int:
    return now(millis, timezone.utc)


def unique_timestamp_millis() -> int:
    """
    Returns the current epoch time in milliseconds, bumped by one if necessary so that no two calls within
    this process ever return the same value.
    """
    global _last_millis
    with _millis_lock:
        value = max(now_utc(millis=True), _last_millis + 1)
        _last_millis = value
        return value
