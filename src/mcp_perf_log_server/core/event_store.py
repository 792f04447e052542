"""Per-URL event accumulation and start/end matching.

The store is filled while records are ingested and turned into a list of
completed requests by a single ``finalize()`` call. After that it is read-only.

Matching is greedy and chronological per URL: each start (ascending) takes the
earliest unused end that is strictly later and less than
``MAX_REQUEST_DURATION_MS`` away. Starts left over get an estimated duration,
namely the running average of measured requests of the same type produced so
far in this run, or a per-type default when there are none yet. Because that
average depends on what was produced before, the construction order is fixed:
direct timings in ingestion order first, then URLs in first-seen order.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from .classifier import classify_url
from .models import (
    CompletedRequest,
    DirectTiming,
    EventKind,
    IngestStats,
    ResourceEvent,
    ResourceType,
    UrlTimeline,
)
from .timestamps import MAX_EPOCH_MS, round_half_up

logger = logging.getLogger(__name__)

MAX_REQUEST_DURATION_MS = 60_000

DEFAULT_DURATIONS_MS: Mapping[ResourceType, int] = {
    ResourceType.SCRIPT: 800,
    ResourceType.STYLESHEET: 300,
    ResourceType.API: 1200,
    ResourceType.IMAGE: 500,
    ResourceType.FONT: 400,
    ResourceType.PAGE: 600,
}
FALLBACK_DURATION_MS = 500


def pair_start_end(
    start_times: list[int],
    end_times: list[int],
    *,
    max_duration_ms: int = MAX_REQUEST_DURATION_MS,
) -> tuple[list[tuple[int, int]], list[int]]:
    """Greedily pair sorted start and end instants.

    Returns (pairs, unpaired_starts). Ends are consumed by position, so equal
    end instants are independent of each other.
    """
    used = [False] * len(end_times)
    pairs: list[tuple[int, int]] = []
    unpaired: list[int] = []

    for start in start_times:
        match_idx: int | None = None
        for idx, end in enumerate(end_times):
            if used[idx] or end <= start:
                continue
            if end - start >= max_duration_ms:
                # Ends are sorted: every later end is even further away.
                break
            match_idx = idx
            break

        if match_idx is None:
            unpaired.append(start)
            continue
        used[match_idx] = True
        pairs.append((start, end_times[match_idx]))

    return pairs, unpaired


class _RunningAverages:
    """Running mean of measured (non-estimated) durations per resource type."""

    def __init__(self) -> None:
        self._totals: dict[ResourceType, int] = {}
        self._counts: dict[ResourceType, int] = {}

    def observe(self, request: CompletedRequest) -> None:
        if request.estimated:
            return
        t = request.resource_type
        self._totals[t] = self._totals.get(t, 0) + request.duration
        self._counts[t] = self._counts.get(t, 0) + 1

    def estimate(self, resource_type: ResourceType) -> int:
        count = self._counts.get(resource_type, 0)
        if count == 0:
            return DEFAULT_DURATIONS_MS.get(resource_type, FALLBACK_DURATION_MS)
        return round_half_up(self._totals[resource_type] / count)


class EventStore:
    """Owns every URL timeline of one analysis run."""

    def __init__(self, stats: IngestStats | None = None) -> None:
        self.stats = stats if stats is not None else IngestStats()
        self._timelines: dict[str, UrlTimeline] = {}
        self._direct: list[DirectTiming] = []
        self._earliest_ms: int | None = None
        self._completed: list[CompletedRequest] | None = None

    @property
    def finalized(self) -> bool:
        return self._completed is not None

    @property
    def timelines(self) -> Mapping[str, UrlTimeline]:
        return self._timelines

    @property
    def url_count(self) -> int:
        return len(self._timelines)

    def _ensure_open(self) -> None:
        if self._completed is not None:
            raise RuntimeError("EventStore is finalized; create a new store for another run")

    def _observe_instant(self, ms: int) -> None:
        if self._earliest_ms is None or ms < self._earliest_ms:
            self._earliest_ms = ms

    def add_event(self, url: object, timestamp_ms: object, kind: EventKind) -> bool:
        """Append one event to the URL's timeline. Invalid input is rejected, not raised."""
        self._ensure_open()

        if not isinstance(url, str) or not url:
            self.stats.events_rejected += 1
            logger.debug("Rejecting event with invalid URL %r", url)
            return False
        if (
            isinstance(timestamp_ms, bool)
            or not isinstance(timestamp_ms, int)
            or not 0 < timestamp_ms <= MAX_EPOCH_MS
        ):
            self.stats.events_rejected += 1
            logger.debug("Rejecting event for %s with invalid timestamp %r", url, timestamp_ms)
            return False

        timeline = self._timelines.get(url)
        if timeline is None:
            timeline = UrlTimeline(url=url, resource_type=classify_url(url))
            self._timelines[url] = timeline

        if kind is EventKind.START:
            timeline.start_times.append(timestamp_ms)
        elif kind is EventKind.END:
            timeline.end_times.append(timestamp_ms)
        else:
            timeline.unknown_times.append(timestamp_ms)

        self._observe_instant(timestamp_ms)
        self.stats.events_accepted += 1
        return True

    def add_resource_event(self, event: ResourceEvent) -> bool:
        return self.add_event(event.url, event.timestamp_ms, event.kind)

    def add_direct(self, timing: DirectTiming) -> bool:
        """Record a pre-completed interval; it bypasses start/end matching."""
        self._ensure_open()

        if (
            not timing.url
            or not 0 <= timing.duration_ms <= MAX_EPOCH_MS
            or (
                timing.start_ms is not None
                and timing.start_ms + timing.duration_ms > MAX_EPOCH_MS
            )
        ):
            self.stats.events_rejected += 1
            logger.debug("Rejecting direct timing %r", timing)
            return False

        self._direct.append(timing)
        self.stats.direct_timings += 1
        if timing.start_ms is not None:
            self._observe_instant(timing.start_ms)
        else:
            self.stats.unanchored_timings += 1
        return True

    def add_facts(self, facts: Iterable[ResourceEvent | DirectTiming]) -> int:
        """Fold extracted facts into the store; returns how many were accepted."""
        accepted = 0
        for fact in facts:
            if isinstance(fact, DirectTiming):
                ok = self.add_direct(fact)
            else:
                ok = self.add_resource_event(fact)
            accepted += int(ok)
        return accepted

    def finalize(self) -> list[CompletedRequest]:
        """Pair events into completed requests. May be called exactly once."""
        self._ensure_open()

        completed: list[CompletedRequest] = []
        averages = _RunningAverages()

        def emit(request: CompletedRequest) -> None:
            if request.end_time > MAX_EPOCH_MS:
                self.stats.events_rejected += 1
                logger.debug("Dropping %s: ends past the representable range", request.url)
                return
            completed.append(request)
            averages.observe(request)

        anchor = self._earliest_ms if self._earliest_ms is not None else 0
        for timing in self._direct:
            start = timing.start_ms if timing.start_ms is not None else anchor
            emit(
                CompletedRequest(
                    url=timing.url,
                    resource_type=classify_url(timing.url),
                    start_time=start,
                    end_time=start + timing.duration_ms,
                )
            )

        for timeline in self._timelines.values():
            timeline.sort()
            pairs, unpaired = pair_start_end(timeline.start_times, timeline.end_times)
            for start, end in pairs:
                emit(
                    CompletedRequest(
                        url=timeline.url,
                        resource_type=timeline.resource_type,
                        start_time=start,
                        end_time=end,
                    )
                )
            for start in unpaired:
                duration = averages.estimate(timeline.resource_type)
                emit(
                    CompletedRequest(
                        url=timeline.url,
                        resource_type=timeline.resource_type,
                        start_time=start,
                        end_time=start + duration,
                        estimated=True,
                    )
                )
            logger.debug(
                "Matched %s: %d paired, %d estimated, %d orphan ends",
                timeline.url,
                len(pairs),
                len(unpaired),
                len(timeline.end_times) - len(pairs),
            )

        self._completed = completed
        logger.info(
            "Finalized %d URLs into %d completed requests (%d estimated)",
            len(self._timelines),
            len(completed),
            sum(1 for r in completed if r.estimated),
        )
        return list(completed)

    @property
    def completed(self) -> list[CompletedRequest]:
        """Completed requests produced by finalize()."""
        if self._completed is None:
            raise RuntimeError("EventStore has not been finalized yet")
        return list(self._completed)
