"""Flat JSON-object extractor."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

from ..models import IngestStats, RawRecord
from .base import (
    ACTION_KEYS,
    TIME_KEYS,
    URL_KEYS,
    Fact,
    build_fact,
    coerce_url,
    extract_duration,
    first_present,
    resolve_timestamp,
)


@dataclass(frozen=True, slots=True)
class FlatObjectExtractor:
    """Extract one fact from an object with url/timestamp/action/duration fields."""

    url_keys: Sequence[str] = URL_KEYS
    time_keys: Sequence[str] = TIME_KEYS
    action_keys: Sequence[str] = ACTION_KEYS

    def extract(self, record: RawRecord, *, stats: IngestStats) -> Iterator[Fact]:
        """Yield the fact for a flat object, or nothing when it is unusable."""
        if not isinstance(record, Mapping):
            return

        # The first populated time field decides; later fields are not consulted.
        ts = resolve_timestamp(first_present(record, self.time_keys), stats=stats)

        url = None
        for key in self.url_keys:
            url = coerce_url(record.get(key))
            if url is not None:
                break

        fact = build_fact(
            url=url,
            timestamp_ms=ts,
            action=first_present(record, self.action_keys),
            duration=extract_duration(record),
        )
        if fact is not None:
            yield fact
