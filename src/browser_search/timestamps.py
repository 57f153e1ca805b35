"""Convert browser-native visit times to timezone-aware UTC datetimes.

| Schema   | Stored unit            | Epoch origin |
|----------|------------------------|--------------|
| Chromium | microseconds (int)     | 1601-01-01   |
| WebKit   | seconds (float)        | 2001-01-01   |
| Mozilla  | microseconds (int)     | 1970-01-01   |
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

# Seconds from 1970-01-01 to 2001-01-01 (Safari/WebKit epoch).
APPLE_EPOCH_OFFSET = 978307200
# Seconds from 1601-01-01 to 1970-01-01 (Chrome epoch).
CHROME_EPOCH_OFFSET = 11644473600

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
CHROME_EPOCH = UNIX_EPOCH - timedelta(seconds=CHROME_EPOCH_OFFSET)
APPLE_EPOCH = UNIX_EPOCH + timedelta(seconds=APPLE_EPOCH_OFFSET)


def chrome_to_datetime(ts: int | None) -> datetime | None:
    """Microseconds since 1601-01-01; 0 means "never"."""
    if not ts:
        return None
    try:
        return CHROME_EPOCH + timedelta(microseconds=int(ts))
    except (TypeError, ValueError, OverflowError):
        return None


def webkit_to_datetime(ts: float | int | None) -> datetime | None:
    """Seconds (fractional) since 2001-01-01."""
    if ts is None:
        return None
    try:
        return APPLE_EPOCH + timedelta(seconds=float(ts))
    except (TypeError, ValueError, OverflowError):
        return None


def mozilla_to_datetime(ts: int | None) -> datetime | None:
    """Microseconds since the Unix epoch (PRTime); 0 means "never"."""
    if not ts:
        return None
    try:
        return UNIX_EPOCH + timedelta(microseconds=int(ts))
    except (TypeError, ValueError, OverflowError):
        return None


def datetime_to_chrome(dt: datetime) -> int:
    return _micros(dt - CHROME_EPOCH)


def datetime_to_webkit(dt: datetime) -> float:
    return (dt - APPLE_EPOCH).total_seconds()


def datetime_to_mozilla(dt: datetime) -> int:
    return _micros(dt - UNIX_EPOCH)


def _micros(delta: timedelta) -> int:
    return (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
