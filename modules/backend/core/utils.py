"""
Clock helpers.

Notes carry naive-UTC datetimes; image rows carry integer unix seconds,
the form the image upload clients already send and compare against.
"""

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Naive datetime in UTC, the form stored in notes.created_at/updated_at."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def unix_now() -> int:
    return int(time.time())
