"""Plain-text log line extractor.

Lines look like ``2025-06-03T04:19:29.591Z + 3 https://example.com/app.js``.
Lines that carry no marker but mention URLs yield UNKNOWN events for each URL.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass

from ..models import EventKind, IngestStats, RawRecord, ResourceEvent
from .base import Fact, resolve_timestamp


@dataclass(frozen=True, slots=True)
class TextLineExtractor:
    """Extract events from timestamp-prefixed text lines."""

    _ts_re = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z)")
    _start_re = re.compile(r"\+ \d+ (.+)$")
    _end_re = re.compile(r"- \d+ (.+)$")
    _url_res = (
        re.compile(r"https?://[^\s]+"),
        re.compile(r"['\"](/[^'\"]*)['\"]"),
    )

    def extract(self, record: RawRecord, *, stats: IngestStats) -> Iterator[Fact]:
        """Yield start/end events for marker lines, UNKNOWN events for URL mentions."""
        if not isinstance(record, str):
            return

        line = record.rstrip("\r\n")
        m = self._ts_re.match(line)
        if not m:
            return
        ts = resolve_timestamp(m.group(1), stats=stats)
        if ts is None:
            return

        m = self._start_re.search(line)
        if m:
            yield ResourceEvent(url=m.group(1).strip(), timestamp_ms=ts, kind=EventKind.START)
            return

        m = self._end_re.search(line)
        if m:
            yield ResourceEvent(url=m.group(1).strip(), timestamp_ms=ts, kind=EventKind.END)
            return

        for pattern in self._url_res:
            urls = pattern.findall(line)
            if not urls:
                continue
            for url in urls:
                url = url.replace("'", "").replace('"', "")
                yield ResourceEvent(url=url, timestamp_ms=ts, kind=EventKind.UNKNOWN)
            break
