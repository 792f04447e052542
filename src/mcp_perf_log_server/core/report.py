"""Report models handed to presentation layers and MCP clients."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Priority = Literal["high", "medium", "low"]


class Summary(BaseModel):
    total_urls: int = Field(description="Distinct URLs that received at least one event.")
    completed_requests: int = 0
    estimated_requests: int = 0
    average_time: int = Field(0, description="Mean duration in ms (rounded).")
    max_time: int = 0
    min_time: int = 0
    cumulative_time: int = Field(0, description="Sum of all durations (serial loading model).")
    cumulative_time_seconds: float = 0.0
    cumulative_time_minutes: float = 0.0
    actual_total_time: int = Field(
        0, description="Latest end minus earliest start (wall-clock span)."
    )
    actual_total_time_seconds: float = 0.0
    loading_start_time: str | None = None
    loading_end_time: str | None = None
    parallel_efficiency: float = Field(
        0.0, description="Percent of serial time saved by overlapping loads."
    )


class TopResource(BaseModel):
    rank: int
    duration: int
    type: str
    url: str
    short_url: str
    estimated: bool = False


class TypeStats(BaseModel):
    count: int = 0
    total_time: int = 0
    avg_time: int = 0
    min_time: int = 0
    max_time: int = 0
    estimated_count: int = 0
    percentage: float = Field(0.0, description="Share of request count, in percent.")
    time_percentage: float = Field(0.0, description="Share of cumulative time, in percent.")


class TypeTotals(BaseModel):
    count: int = 0
    total_time: int = 0
    avg_time: int = 0


class DuplicateEntry(BaseModel):
    url: str
    file_name: str
    count: int
    avg_duration: int
    wasted_time: int = Field(description="avg_duration x (count - 1), rounded.")
    durations: list[int] = Field(default_factory=list)
    resource_type: str


class Recommendation(BaseModel):
    priority: Priority
    issue: str
    detail: str
    suggestion: str
    url: str | None = None
    duplicate_stats: list[DuplicateEntry] | None = None
    total_wasted_time: int | None = None
    total_duplicate_requests: int | None = None


class ScoreComponent(BaseModel):
    name: str
    value: float
    score: int
    weight: float


class ScoreCard(BaseModel):
    score: int = Field(ge=0, le=100)
    grade: Literal["A", "B", "C", "D", "F"]
    grade_label: str
    components: list[ScoreComponent] = Field(default_factory=list)
    details: list[str] = Field(default_factory=list)


class Diagnostics(BaseModel):
    records_seen: int = 0
    records_skipped: int = 0
    events_accepted: int = 0
    events_rejected: int = 0
    timestamp_failures: int = 0
    direct_timings: int = 0
    unanchored_timings: int = 0


class PerformanceReport(BaseModel):
    summary: Summary
    top_resources: list[TopResource] = Field(default_factory=list)
    type_stats: dict[str, TypeStats] = Field(default_factory=dict)
    type_totals: TypeTotals = Field(default_factory=TypeTotals)
    duplicates: list[DuplicateEntry] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    score: ScoreCard
    diagnostics: Diagnostics = Field(default_factory=Diagnostics)
