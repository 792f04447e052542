"""Global and per-type statistics over completed requests."""

from __future__ import annotations

from collections.abc import Sequence

from .models import CompletedRequest
from .report import Summary, TopResource, TypeStats, TypeTotals
from .timestamps import format_epoch_ms, round_half_up


def by_duration_desc(requests: Sequence[CompletedRequest]) -> list[CompletedRequest]:
    """Return requests ordered slowest first; ties keep their production order."""
    return sorted(requests, key=lambda r: r.duration, reverse=True)


def shorten(text: str, limit: int) -> str:
    """Truncate text to ``limit`` characters, ending in '...' when cut."""
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def parallel_efficiency(cumulative_ms: int, actual_ms: int) -> float:
    """Percent of serial time saved by parallel loading.

    0 when undefined, and also when idle gaps make the wall-clock span longer
    than the serial sum. Kept below 100 after rounding.
    """
    if actual_ms <= 0 or cumulative_ms <= 0:
        return 0.0
    value = round((1 - actual_ms / cumulative_ms) * 100, 1)
    return min(max(0.0, value), 99.9)


def summarize(requests: Sequence[CompletedRequest], *, total_urls: int) -> Summary:
    """Compute counts, duration extremes, cumulative vs. wall-clock time and efficiency."""
    if not requests:
        return Summary(total_urls=total_urls)

    durations = [r.duration for r in requests]
    cumulative = sum(durations)
    earliest = min(r.start_time for r in requests)
    latest = max(r.end_time for r in requests)
    actual = latest - earliest

    return Summary(
        total_urls=total_urls,
        completed_requests=len(requests),
        estimated_requests=sum(1 for r in requests if r.estimated),
        average_time=round_half_up(cumulative / len(durations)),
        max_time=max(durations),
        min_time=min(durations),
        cumulative_time=cumulative,
        cumulative_time_seconds=round(cumulative / 1000, 2),
        cumulative_time_minutes=round(cumulative / 60000, 2),
        actual_total_time=actual,
        actual_total_time_seconds=round(actual / 1000, 2),
        loading_start_time=format_epoch_ms(earliest),
        loading_end_time=format_epoch_ms(latest),
        parallel_efficiency=parallel_efficiency(cumulative, actual),
    )


def type_breakdown(
    requests: Sequence[CompletedRequest],
) -> tuple[dict[str, TypeStats], TypeTotals]:
    """Per-type statistics keyed by type label, in order of first appearance."""
    stats: dict[str, TypeStats] = {}
    total_count = 0
    total_time = 0

    for r in requests:
        key = r.resource_type.value
        s = stats.get(key)
        if s is None:
            s = TypeStats(min_time=r.duration, max_time=r.duration)
            stats[key] = s
        s.count += 1
        s.total_time += r.duration
        s.min_time = min(s.min_time, r.duration)
        s.max_time = max(s.max_time, r.duration)
        if r.estimated:
            s.estimated_count += 1
        total_count += 1
        total_time += r.duration

    for s in stats.values():
        s.avg_time = round_half_up(s.total_time / s.count)
        s.percentage = round(s.count / total_count * 100, 1)
        s.time_percentage = round(s.total_time / total_time * 100, 1) if total_time else 0.0

    totals = TypeTotals(
        count=total_count,
        total_time=total_time,
        avg_time=round_half_up(total_time / total_count) if total_count else 0,
    )
    return stats, totals


def top_resources(requests: Sequence[CompletedRequest], top_n: int) -> list[TopResource]:
    """The ``top_n`` slowest requests; ``requests`` must already be slowest-first."""
    return [
        TopResource(
            rank=idx,
            duration=r.duration,
            type=r.resource_type.value,
            url=r.url,
            short_url=shorten(r.url, 80),
            estimated=r.estimated,
        )
        for idx, r in enumerate(requests[: max(0, top_n)], start=1)
    ]
