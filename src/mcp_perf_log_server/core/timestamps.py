"""Timestamp normalization.

Every timestamp that enters the pipeline is converted to integer epoch
milliseconds (UTC). Patterns are tried in a fixed order and the first one that
matches wins, regardless of how much of the input it covers.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import UTC, datetime, timedelta

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

_ISO_MS_RE = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})\.(\d{3})Z")
_SPACED_MS_RE = re.compile(r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\.(\d{3})")
_EPOCH_MS_RE = re.compile(r"(\d{13})")

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
# 9999-12-31T23:59:59.999Z, the last instant a datetime can hold.
MAX_EPOCH_MS = 253_402_300_799_999


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to epoch milliseconds. Naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return round_half_up(dt.astimezone(UTC).timestamp() * 1000)


def from_epoch_ms(ms: int) -> datetime:
    """Return the UTC datetime for epoch milliseconds."""
    return _EPOCH + timedelta(milliseconds=ms)


def format_epoch_ms(ms: int) -> str:
    """Render epoch milliseconds as ISO-8601 with millisecond precision and 'Z'."""
    return from_epoch_ms(ms).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return int(math.floor(value + 0.5))


def in_epoch_range(ms: int) -> bool:
    """True for a positive instant that can be rendered as a datetime."""
    return 0 < ms <= MAX_EPOCH_MS


def _from_match(date_part: str, millis: str) -> int | None:
    try:
        dt = datetime.strptime(date_part, "%Y-%m-%dT%H:%M:%S").replace(tzinfo=UTC)
    except ValueError as exc:
        logger.debug("Invalid calendar timestamp %r: %s", date_part, exc)
        return None
    ms = to_epoch_ms(dt) + int(millis)
    return ms if in_epoch_range(ms) else None


def parse_timestamp(raw: object) -> int | None:
    """Parse a timestamp string or number into epoch milliseconds.

    Returns None instead of raising when nothing parses, so callers can skip
    the offending event.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        if not math.isfinite(raw):
            return None
        ms = round_half_up(raw)
        if not in_epoch_range(ms):
            logger.debug("Numeric timestamp out of range: %r", raw)
            return None
        return ms

    if not isinstance(raw, str):
        logger.debug("Unsupported timestamp type %s", type(raw).__name__)
        return None

    s = raw.strip()
    if not s:
        return None

    m = _ISO_MS_RE.search(s)
    if m:
        return _from_match(m.group(1), m.group(2))

    m = _SPACED_MS_RE.search(s)
    if m:
        return _from_match(m.group(1).replace(" ", "T"), m.group(2))

    m = _EPOCH_MS_RE.search(s)
    if m:
        ms = int(m.group(1))
        return ms if in_epoch_range(ms) else None

    try:
        ms = to_epoch_ms(date_parser.parse(s))
    except (ValueError, OverflowError, OSError) as exc:
        logger.debug("Unparseable timestamp %r: %s", s, exc)
        return None

    if not in_epoch_range(ms):
        return None
    return ms
