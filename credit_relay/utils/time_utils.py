"""Time helpers"""

import time
from datetime import datetime, timezone


def epoch_millis() -> int:
    """Milliseconds since the Unix epoch"""
    return int(time.time() * 1000)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
