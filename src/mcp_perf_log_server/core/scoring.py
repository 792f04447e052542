"""Composite performance score and remediation advice."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .aggregation import shorten
from .duplicates import DuplicateSummary, file_name
from .models import CompletedRequest, ResourceType
from .report import Recommendation, ScoreCard, ScoreComponent, Summary, TypeStats
from .timestamps import round_half_up

TYPE_SUGGESTIONS: Mapping[ResourceType, str] = {
    ResourceType.SCRIPT: "Split bundles, enable tree shaking and ship production builds",
    ResourceType.STYLESHEET: "Merge stylesheets, drop unused rules and minify CSS",
    ResourceType.API: "Speed up the endpoint, cache responses and batch API calls",
    ResourceType.IMAGE: "Serve WebP, compress appropriately and lazy-load images",
    ResourceType.FONT: "Use a font-display strategy and preload critical fonts",
    ResourceType.PAGE: "Check server response time and tune the server configuration",
    ResourceType.POLYFILL: "Load only the polyfills you need and rely on feature detection",
}
DEFAULT_SUGGESTION = "Review the resource loading strategy and network conditions"

WEIGHTS: Mapping[str, float] = {
    "average_time": 0.30,
    "actual_total_time": 0.35,
    "parallel_efficiency": 0.20,
    "request_count": 0.10,
    "estimated_ratio": 0.05,
}

_GRADES: Sequence[tuple[int, str, str]] = (
    (90, "A", "Excellent"),
    (80, "B", "Good"),
    (70, "C", "Needs improvement"),
    (60, "D", "Needs major improvement"),
)


def suggestion_for(resource_type: ResourceType | str) -> str:
    """Type-specific remediation hint."""
    try:
        resource_type = ResourceType(resource_type)
    except ValueError:
        return DEFAULT_SUGGESTION
    return TYPE_SUGGESTIONS.get(resource_type, DEFAULT_SUGGESTION)


def estimated_ratio(summary: Summary) -> float:
    if summary.completed_requests == 0:
        return 0.0
    return summary.estimated_requests / summary.completed_requests


def _display_name(url: str) -> str:
    return shorten(file_name(url), 40)


def _score_average(avg: float) -> tuple[int, str | None]:
    if avg > 2000:
        return 30, None
    if avg > 1000:
        return 50, None
    if avg > 600:
        return 70, None
    if avg > 300:
        return 85, None
    return 95, None


def _score_actual_total(actual: float) -> tuple[int, str]:
    if actual > 30000:
        return 30, "Actual total load time is very long (>30s)"
    if actual > 15000:
        return 50, "Actual total load time is long (>15s)"
    if actual > 8000:
        return 70, "Actual total load time is moderate (>8s)"
    if actual > 3000:
        return 85, "Actual total load time is good (<8s)"
    return 95, "Actual total load time is excellent (<3s)"


def _score_parallel(efficiency: float) -> tuple[int, str]:
    if efficiency < 30:
        return 60, "Parallel loading efficiency is low"
    if efficiency < 60:
        return 75, "Parallel loading efficiency is moderate"
    if efficiency < 80:
        return 85, "Parallel loading efficiency is good"
    return 95, "Parallel loading efficiency is excellent"


def _score_count(count: int) -> tuple[int, str]:
    if count > 100:
        return 60, "Too many resources (>100)"
    if count > 50:
        return 75, "Many resources (>50)"
    if count > 20:
        return 90, "Moderate number of resources (<50)"
    return 95, "Few resources (<20)"


def _score_estimated(ratio: float) -> tuple[int, str]:
    if ratio > 0.5:
        return 60, "Most timings are estimated"
    if ratio > 0.3:
        return 80, "Some timings are estimated"
    if ratio > 0:
        return 90, "A few timings are estimated"
    return 100, "All timings were measured"


def grade_for(score: int) -> tuple[str, str]:
    """Letter grade and label for a 0-100 score."""
    for floor, letter, label in _GRADES:
        if score >= floor:
            return letter, label
    return "F", "Needs urgent optimization"


def compute_score(summary: Summary) -> ScoreCard:
    """Weighted composite score over the summary metrics."""
    ratio = estimated_ratio(summary)
    inputs: list[tuple[str, float, tuple[int, str | None]]] = [
        ("average_time", summary.average_time, _score_average(summary.average_time)),
        (
            "actual_total_time",
            summary.actual_total_time,
            _score_actual_total(summary.actual_total_time),
        ),
        (
            "parallel_efficiency",
            summary.parallel_efficiency,
            _score_parallel(summary.parallel_efficiency),
        ),
        (
            "request_count",
            summary.completed_requests,
            _score_count(summary.completed_requests),
        ),
        ("estimated_ratio", ratio, _score_estimated(ratio)),
    ]

    components: list[ScoreComponent] = []
    details: list[str] = []
    weighted = 0.0
    for name, value, (points, detail) in inputs:
        weight = WEIGHTS[name]
        weighted += points * weight
        components.append(ScoreComponent(name=name, value=value, score=points, weight=weight))
        if detail:
            details.append(detail)

    # strip float noise before rounding
    score = round_half_up(round(weighted, 6))
    grade, label = grade_for(score)
    return ScoreCard(
        score=score,
        grade=grade,
        grade_label=label,
        components=components,
        details=details,
    )


def build_recommendations(
    *,
    summary: Summary,
    slowest_first: Sequence[CompletedRequest],
    type_stats: Mapping[str, TypeStats],
    duplicates: DuplicateSummary,
) -> list[Recommendation]:
    """Independent checks over the run, in a fixed order."""
    recs: list[Recommendation] = []

    if slowest_first:
        slowest = slowest_first[0]
        if slowest.duration > 1000:
            note = " (estimated)" if slowest.estimated else ""
            recs.append(
                Recommendation(
                    priority="high",
                    issue=f"Slowest resource: {slowest.resource_type.value}",
                    detail=f"{_display_name(slowest.url)} took {slowest.duration}ms{note}",
                    suggestion=suggestion_for(slowest.resource_type),
                    url=slowest.url,
                )
            )

    for type_name, stats in type_stats.items():
        if stats.avg_time <= 500:
            continue
        note = (
            f" (including {stats.estimated_count} estimated)" if stats.estimated_count else ""
        )
        recs.append(
            Recommendation(
                priority="high" if stats.avg_time > 1000 else "medium",
                issue=f"{type_name} resources load slowly",
                detail=f"Average load time {stats.avg_time}ms across {stats.count} resources{note}",
                suggestion=suggestion_for(type_name),
            )
        )

    if summary.average_time > 300:
        recs.append(
            Recommendation(
                priority="medium",
                issue="Overall load performance needs work",
                detail=f"Average load time {summary.average_time}ms",
                suggestion="Bundle resources, add caching and serve assets from a CDN",
            )
        )

    actual = summary.actual_total_time
    if actual > 20000:
        recs.append(
            Recommendation(
                priority="high",
                issue="Actual total load time is too long",
                detail=f"Wall-clock load time {actual}ms ({summary.actual_total_time_seconds:.2f}s)",
                suggestion=(
                    "Optimize the critical path, preload key resources and consider "
                    "server-side rendering or static generation"
                ),
            )
        )
    elif actual > 8000:
        recs.append(
            Recommendation(
                priority="medium",
                issue="Actual total load time is long",
                detail=f"Wall-clock load time {actual}ms ({summary.actual_total_time_seconds:.2f}s)",
                suggestion=(
                    "Reorder resource loading, preload critical resources and reduce "
                    "render-blocking resources"
                ),
            )
        )

    if summary.cumulative_time > 60000:
        recs.append(
            Recommendation(
                priority="medium",
                issue="Cumulative load time is high",
                detail=(
                    f"Cumulative load time {summary.cumulative_time}ms "
                    f"({summary.cumulative_time_seconds:.2f}s)"
                ),
                suggestion=(
                    "Lazy-load resources, split code, drop non-essential resources or "
                    "load more in parallel"
                ),
            )
        )

    if summary.completed_requests > 0:
        efficiency = summary.parallel_efficiency
        if efficiency < 50:
            recs.append(
                Recommendation(
                    priority="high",
                    issue="Low parallel loading efficiency",
                    detail=f"Parallel efficiency is only {efficiency}%; most time is spent loading serially",
                    suggestion=(
                        "Review resource dependencies, reorder loading, use HTTP/2 "
                        "multiplexing and reduce blocking resources"
                    ),
                )
            )
        elif efficiency < 70:
            recs.append(
                Recommendation(
                    priority="medium",
                    issue="Parallel loading efficiency can improve",
                    detail=f"Parallel efficiency is {efficiency}%",
                    suggestion="Reorder resource loading and reduce dependencies between resources",
                )
            )

    if summary.completed_requests > 50:
        recs.append(
            Recommendation(
                priority="medium",
                issue="Too many resources",
                detail=f"Found {summary.completed_requests} resource requests",
                suggestion="Merge small files, use sprites and tune module bundling",
            )
        )

    if estimated_ratio(summary) > 0.3:
        recs.append(
            Recommendation(
                priority="low",
                issue="Incomplete log data",
                detail=f"{summary.estimated_requests} requests use estimated durations",
                suggestion="Log both the start and the end of every request",
            )
        )

    extremely_slow = [r for r in slowest_first if r.duration > 5000]
    if extremely_slow:
        worst = extremely_slow[0]
        recs.append(
            Recommendation(
                priority="high",
                issue="Extremely slow resources found",
                detail=(
                    f"{len(extremely_slow)} resources took over 5s; slowest is "
                    f"{_display_name(worst.url)} ({worst.duration}ms)"
                ),
                suggestion=(
                    "Check network conditions and server response time for these "
                    "resources, or remove the ones that are not needed"
                ),
                url=worst.url,
            )
        )

    if duplicates.entries:
        shown = [
            f"{_display_name(d.url)} ({d.count}x, wasted {d.wasted_time}ms)"
            for d in duplicates.entries[:10]
        ]
        more = (
            f" and {len(duplicates.entries)} resources in total"
            if len(duplicates.entries) > 10
            else ""
        )
        recs.append(
            Recommendation(
                priority="medium",
                issue="Duplicate resource loads found",
                detail=(
                    f"{len(duplicates.entries)} resources loaded more than once, wasting about "
                    f"{duplicates.total_wasted_time}ms. Duplicates: {', '.join(shown)}{more}"
                ),
                suggestion=(
                    "Deduplicate resource loads and apply a caching strategy. Probable "
                    "API preflight requests are already excluded"
                ),
                duplicate_stats=list(duplicates.entries),
                total_wasted_time=duplicates.total_wasted_time,
                total_duplicate_requests=duplicates.total_duplicate_requests,
            )
        )

    return recs
