"""Analysis session: extraction -> event store -> statistics -> score.

This module is the main integration point of the engine. One
``AnalysisSession`` covers one run; it accumulates records until
``report()`` (or ``finalize()``) is called and is read-only afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Iterable
from pathlib import Path

from .aggregation import by_duration_desc, summarize, top_resources, type_breakdown
from .config import AnalysisConfig, resolve_analysis_config
from .duplicates import summarize_duplicates
from .event_store import EventStore
from .extraction import RecordDispatcher
from .log_source import iter_records
from .models import CompletedRequest, IngestStats, RawRecord
from .report import Diagnostics, PerformanceReport
from .scoring import build_recommendations, compute_score

logger = logging.getLogger(__name__)


class AnalysisSession:
    """Owns the event store and diagnostics of a single analysis run."""

    def __init__(self, *, dispatcher: RecordDispatcher | None = None) -> None:
        self.stats = IngestStats()
        self.store = EventStore(self.stats)
        self._dispatcher = dispatcher or RecordDispatcher()
        self._completed: list[CompletedRequest] | None = None

    def ingest(self, record: RawRecord) -> int:
        """Extract one record into the store; returns the number of accepted facts."""
        if self._completed is not None:
            raise RuntimeError("AnalysisSession is finalized; start a new session")

        self.stats.records_seen += 1
        accepted = self.store.add_facts(self._dispatcher.extract(record, stats=self.stats))
        if accepted == 0:
            self.stats.records_skipped += 1
            logger.debug("Skipped record #%d (no usable facts)", self.stats.records_seen)
        return accepted

    def ingest_many(self, records: Iterable[RawRecord]) -> int:
        return sum(self.ingest(record) for record in records)

    async def ingest_async(self, records: AsyncIterable[RawRecord]) -> int:
        total = 0
        async for record in records:
            total += self.ingest(record)
        return total

    def finalize(self) -> list[CompletedRequest]:
        """Match events into completed requests (once); later calls return the same list."""
        if self._completed is None:
            self._completed = self.store.finalize()
        return list(self._completed)

    def report(self, *, top_n: int = 20) -> PerformanceReport:
        """Build the full report from the completed requests."""
        slowest_first = by_duration_desc(self.finalize())

        summary = summarize(slowest_first, total_urls=self.store.url_count)
        type_stats, totals = type_breakdown(slowest_first)
        duplicates = summarize_duplicates(slowest_first)

        return PerformanceReport(
            summary=summary,
            top_resources=top_resources(slowest_first, top_n),
            type_stats=type_stats,
            type_totals=totals,
            duplicates=duplicates.entries,
            recommendations=build_recommendations(
                summary=summary,
                slowest_first=slowest_first,
                type_stats=type_stats,
                duplicates=duplicates,
            ),
            score=compute_score(summary),
            diagnostics=Diagnostics(
                records_seen=self.stats.records_seen,
                records_skipped=self.stats.records_skipped,
                events_accepted=self.stats.events_accepted,
                events_rejected=self.stats.events_rejected,
                timestamp_failures=self.stats.timestamp_failures,
                direct_timings=self.stats.direct_timings,
                unanchored_timings=self.stats.unanchored_timings,
            ),
        )


def analyze_records(
    records: Iterable[RawRecord],
    *,
    cfg: AnalysisConfig | None = None,
) -> PerformanceReport:
    """Run the whole pipeline over in-memory records."""
    cfg = resolve_analysis_config(cfg)
    session = AnalysisSession()
    session.ingest_many(records)
    return session.report(top_n=cfg.top_n)


async def analyze_log_file(
    log_path: str | Path,
    *,
    cfg: AnalysisConfig | None = None,
) -> tuple[PerformanceReport, list[CompletedRequest]]:
    """Read a log file and analyze it; returns the report and the completed requests."""
    cfg = resolve_analysis_config(cfg)
    session = AnalysisSession()
    await session.ingest_async(
        iter_records(
            log_path,
            encoding=cfg.encoding,
            decode_errors=cfg.decode_errors,
            sniff_lines=cfg.sniff_lines,
        )
    )
    logger.info(
        "Read %d records from %s (%d skipped)",
        session.stats.records_seen,
        log_path,
        session.stats.records_skipped,
    )
    report = session.report(top_n=cfg.top_n)
    return report, session.finalize()
