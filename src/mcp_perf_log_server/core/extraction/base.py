"""Record-shape classification and shared field helpers."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from typing import Protocol

from ..models import DirectTiming, EventKind, IngestStats, RawRecord, ResourceEvent
from ..timestamps import parse_timestamp, round_half_up

logger = logging.getLogger(__name__)

# One extracted fact: either a start/end/unknown marker or a finished interval.
Fact = ResourceEvent | DirectTiming

PAYLOAD_KEY = "textPayload"
OUTER_TIME_KEY = "timestamp"
RECEIVE_TIME_KEY = "receiveTimestamp"

URL_KEYS: Sequence[str] = ("url", "uri", "path", "request", "resource", "src")
TIME_KEYS: Sequence[str] = (
    "timestamp",
    "time",
    "ts",
    "datetime",
    "startTime",
    "date",
    "receiveTimestamp",
)
ACTION_KEYS: Sequence[str] = ("action", "type", "event", "status", "method")
DURATION_KEYS: Sequence[str] = ("duration", "loadTime", "responseTime")

_START_ACTIONS = frozenset({"+", "start", "begin", "request_start"})
_END_ACTIONS = frozenset({"-", "end", "finish", "request_end"})
_EMPTY_MARKERS = frozenset({"", "null", "undefined", "none"})


class RecordShape(str, Enum):
    """Known raw-record variants."""

    NESTED_PAYLOAD = "nested_payload"
    FLAT_OBJECT = "flat_object"
    ARRAY_QUAD = "array_quad"
    ARRAY_TRIPLE = "array_triple"
    TEXT_LINE = "text_line"
    UNSUPPORTED = "unsupported"


class RecordExtractor(Protocol):
    """Extractor interface: yield zero or more facts for one record."""

    def extract(self, record: RawRecord, *, stats: IngestStats) -> Iterator[Fact]:
        """Extract facts from a record of the shape this extractor handles."""
        ...


def classify_record(record: RawRecord) -> RecordShape:
    """Decide which variant a raw record belongs to."""
    if isinstance(record, Mapping):
        payload = record.get(PAYLOAD_KEY)
        if isinstance(payload, str) and payload.strip():
            return RecordShape.NESTED_PAYLOAD
        return RecordShape.FLAT_OBJECT
    if isinstance(record, (list, tuple)):
        if len(record) >= 4:
            return RecordShape.ARRAY_QUAD
        if len(record) == 3:
            return RecordShape.ARRAY_TRIPLE
        return RecordShape.UNSUPPORTED
    if isinstance(record, str):
        return RecordShape.TEXT_LINE
    return RecordShape.UNSUPPORTED


def normalize_action(value: object) -> EventKind:
    """Map a raw action marker to an EventKind."""
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return EventKind.UNKNOWN
    s = str(value).strip().lower()
    if s in _START_ACTIONS:
        return EventKind.START
    if s in _END_ACTIONS:
        return EventKind.END
    return EventKind.UNKNOWN


def coerce_url(value: object) -> str | None:
    """Turn a URL-ish field value into a usable URL string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Mapping):
        href = value.get("href")
        return coerce_url(href) if href is not None else None
    if isinstance(value, (list, tuple, set)):
        return None

    s = str(value).strip()
    if s.lower() in _EMPTY_MARKERS:
        return None
    return s


def _is_blank(value: object) -> bool:
    if value is None or (isinstance(value, bool) and not value):
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return isinstance(value, str) and value == ""


def first_present(record: Mapping[str, object], keys: Sequence[str]) -> object | None:
    """Return the value of the first key holding a non-blank value."""
    for key in keys:
        val = record.get(key)
        if not _is_blank(val):
            return val
    return None


def positive_ms(value: object) -> int | None:
    """Return value as whole milliseconds when it is a positive real number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return round_half_up(value)


def extract_duration(record: Mapping[str, object]) -> int | None:
    """Return the direct duration carried by a record, if any."""
    return positive_ms(first_present(record, DURATION_KEYS))


def resolve_timestamp(value: object, *, stats: IngestStats) -> int | None:
    """Parse a timestamp candidate, counting failures on the run's stats."""
    if _is_blank(value):
        return None
    ms = parse_timestamp(value)
    if ms is None:
        stats.timestamp_failures += 1
        logger.debug("Dropping unparseable timestamp %r", value)
    return ms


def build_fact(
    *,
    url: object,
    timestamp_ms: int | None,
    action: object = None,
    duration: object = None,
) -> Fact | None:
    """Assemble a fact from resolved fields; None when it cannot be placed on a timeline."""
    url_s = coerce_url(url)
    if url_s is None:
        logger.debug("Dropping fact without a resolvable URL")
        return None

    duration_ms = positive_ms(duration)
    if duration_ms is not None:
        return DirectTiming(url=url_s, start_ms=timestamp_ms, duration_ms=duration_ms)

    if timestamp_ms is None:
        logger.debug("Dropping event for %s without a timestamp", url_s)
        return None
    return ResourceEvent(url=url_s, timestamp_ms=timestamp_ms, kind=normalize_action(action))
