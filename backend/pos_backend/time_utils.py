from __future__ import annotations

import time
from typing import Optional


def unix_now() -> int:
    """Server-side 'now' as unix seconds (the canonical timestamp of every row)."""
    return int(time.time())


def start_of_utc_day(now: Optional[int] = None) -> int:
    """Unix seconds of the most recent UTC midnight."""
    if now is None:
        now = unix_now()
    return now - (now % 86400)
