"""Duplicate-load detection with a CORS-preflight filter.

An API URL seen exactly twice, where the shorter load is under 500 ms and the
longer one takes more than twice as long, is assumed to be a preflight
(OPTIONS) exchange followed by the real request and is not reported. This is
an approximation tuned on real logs, not a protocol-level check: it can hide a
genuine double call to a fast endpoint and miss preflights that were slow.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .classifier import classify_url
from .models import CompletedRequest, ResourceType
from .report import DuplicateEntry
from .timestamps import round_half_up

logger = logging.getLogger(__name__)

PREFLIGHT_MAX_MS = 500
PREFLIGHT_RATIO = 2


def looks_like_preflight_pair(resource_type: ResourceType, durations: Sequence[int]) -> bool:
    """True for an API URL with two loads shaped like preflight + actual request."""
    if resource_type is not ResourceType.API or len(durations) != 2:
        return False
    shorter, longer = sorted(durations)
    return shorter < PREFLIGHT_MAX_MS and longer > shorter * PREFLIGHT_RATIO


def file_name(url: str) -> str:
    """Last path segment of a URL, or the URL itself when that is empty."""
    return url.split("/")[-1] or url


@dataclass(frozen=True, slots=True)
class DuplicateSummary:
    """Duplicate entries plus run-level totals."""

    entries: list[DuplicateEntry]
    total_wasted_time: int
    total_duplicate_requests: int


def detect_duplicates(requests: Sequence[CompletedRequest]) -> list[DuplicateEntry]:
    """Report URLs loaded more than once, most-repeated first."""
    return summarize_duplicates(requests).entries


def summarize_duplicates(requests: Sequence[CompletedRequest]) -> DuplicateSummary:
    """Detect duplicates and compute the wasted time they account for."""
    durations_by_url: dict[str, list[int]] = {}
    for r in requests:
        durations_by_url.setdefault(r.url, []).append(r.duration)

    entries: list[DuplicateEntry] = []
    total_wasted = 0.0
    total_repeats = 0

    for url, durations in durations_by_url.items():
        count = len(durations)
        if count < 2:
            continue

        resource_type = classify_url(url)
        if looks_like_preflight_pair(resource_type, durations):
            logger.debug("Ignoring probable preflight pair for %s: %s", url, sorted(durations))
            continue

        avg = sum(durations) / count
        wasted = avg * (count - 1)
        total_wasted += wasted
        total_repeats += count - 1
        entries.append(
            DuplicateEntry(
                url=url,
                file_name=file_name(url),
                count=count,
                avg_duration=round_half_up(avg),
                wasted_time=round_half_up(wasted),
                durations=sorted(durations),
                resource_type=resource_type.value,
            )
        )

    entries.sort(key=lambda e: e.count, reverse=True)
    return DuplicateSummary(
        entries=entries,
        total_wasted_time=round_half_up(total_wasted),
        total_duplicate_requests=total_repeats,
    )
