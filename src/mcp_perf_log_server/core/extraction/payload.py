"""Telemetry-envelope extractor (records wrapping a nested ``textPayload``).

The payload is usually a JSON array such as
``["2025-06-03T04:19:29.591Z", "+", 3, "https://example.com/app.js"]`` or
``["2025-06-03T04:19:29.591Z", "https://example.com/app.js", 420]``.
Plain-text payloads are matched against a few structured patterns instead.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from ..models import IngestStats, RawRecord
from .base import (
    OUTER_TIME_KEY,
    PAYLOAD_KEY,
    RECEIVE_TIME_KEY,
    Fact,
    build_fact,
    resolve_timestamp,
)
from .flat import FlatObjectExtractor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PayloadFields:
    """Fields recovered from a nested payload before timestamp resolution."""

    url: object
    timestamp: object = None
    action: object = None
    duration: object = None


def fields_from_array(arr: list | tuple) -> PayloadFields | None:
    """Read ``[ts, action, id, url]`` or ``[ts, url, duration]`` arrays."""
    if len(arr) >= 4:
        return PayloadFields(timestamp=arr[0], action=arr[1], url=arr[3])
    if len(arr) == 3:
        return PayloadFields(timestamp=arr[0], url=arr[1], duration=arr[2])
    return None


@dataclass(frozen=True, slots=True)
class NestedPayloadExtractor:
    """Extract facts from records carrying a JSON-encoded telemetry payload."""

    fallback: FlatObjectExtractor = FlatObjectExtractor()

    _marker_re = re.compile(r"^([+-])\s+\d+\s+(.+)$")
    _stamped_marker_re = re.compile(
        r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z)\s+([+-])\s+\d+\s+(.+)$"
    )
    _duration_re = re.compile(r"^(.+)\s+(\d+)ms$")

    def parse_payload(self, payload: str) -> PayloadFields | None:
        """Decode the payload as JSON, falling back to structured text patterns."""
        try:
            decoded = json.loads(payload)
        except json.JSONDecodeError:
            return self._parse_text(payload.strip())

        if isinstance(decoded, list):
            return fields_from_array(decoded)
        return None

    def _parse_text(self, payload: str) -> PayloadFields | None:
        m = self._marker_re.match(payload)
        if m:
            return PayloadFields(action=m.group(1), url=m.group(2))
        m = self._stamped_marker_re.match(payload)
        if m:
            return PayloadFields(timestamp=m.group(1), action=m.group(2), url=m.group(3))
        m = self._duration_re.match(payload)
        if m:
            return PayloadFields(url=m.group(1), duration=int(m.group(2)))
        return None

    def extract(self, record: RawRecord, *, stats: IngestStats) -> Iterator[Fact]:
        """Yield the single fact described by the payload (or by the outer record)."""
        if not isinstance(record, Mapping):
            return

        fields = self.parse_payload(record[PAYLOAD_KEY])
        if fields is None:
            logger.debug("Unrecognized textPayload; treating record as a flat object")
            yield from self.fallback.extract(record, stats=stats)
            return

        # Payload timestamp first, then the envelope's own timestamps.
        ts: int | None = None
        for candidate in (
            fields.timestamp,
            record.get(OUTER_TIME_KEY),
            record.get(RECEIVE_TIME_KEY),
        ):
            ts = resolve_timestamp(candidate, stats=stats)
            if ts is not None:
                break

        fact = build_fact(
            url=fields.url,
            timestamp_ms=ts,
            action=fields.action,
            duration=fields.duration,
        )
        if fact is not None:
            yield fact
