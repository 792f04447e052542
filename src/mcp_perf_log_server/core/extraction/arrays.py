"""Extractor for bare array records (``[ts, action, id, url]`` / ``[ts, url, duration]``)."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from ..models import IngestStats, RawRecord
from .base import Fact, build_fact, resolve_timestamp
from .payload import fields_from_array


@dataclass(frozen=True, slots=True)
class ArrayRecordExtractor:
    """Extract a fact from a top-level JSON array record."""

    def extract(self, record: RawRecord, *, stats: IngestStats) -> Iterator[Fact]:
        """Yield the fact for a quad or triple array."""
        if not isinstance(record, (list, tuple)):
            return

        fields = fields_from_array(record)
        if fields is None:
            return

        fact = build_fact(
            url=fields.url,
            timestamp_ms=resolve_timestamp(fields.timestamp, stats=stats),
            action=fields.action,
            duration=fields.duration,
        )
        if fact is not None:
            yield fact
