from __future__ import annotations

from datetime import datetime


def format_timestamp(moment: datetime) -> str:
    """Return `moment` as a fixed-width, sortable `YYYYMMDD-HHMMSS` string."""
    return (
        f"{moment.year:04d}{moment.month:02d}{moment.day:02d}"
        f"-{moment.hour:02d}{moment.minute:02d}{moment.second:02d}"
    )


def now() -> str:
    """Current local wall-clock time as `YYYYMMDD-HHMMSS`."""
    return format_timestamp(datetime.now())
