"""Core data models for resource-load reconstruction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResourceType(str, Enum):
    """Coarse resource categories used for per-type statistics."""

    SCRIPT = "JavaScript"
    STYLESHEET = "CSS"
    FONT = "Font"
    IMAGE = "Image"
    API = "API"
    POLYFILL = "Polyfill"
    PAGE = "HTML"
    OTHER = "Other"


class EventKind(str, Enum):
    """Normalized marker kind for a single resource event."""

    START = "start"
    END = "end"
    UNKNOWN = "unknown"


# A raw log record before extraction: JSON object, JSON array or text line.
RawRecord = Any


@dataclass(frozen=True, slots=True)
class ResourceEvent:
    """A start/end/unknown marker for one URL at one instant."""

    url: str
    timestamp_ms: int
    kind: EventKind


@dataclass(frozen=True, slots=True)
class DirectTiming:
    """Pre-completed interval taken from a record that carries its own duration."""

    url: str
    start_ms: int | None  # None when the record had no resolvable timestamp
    duration_ms: int


@dataclass(slots=True)
class UrlTimeline:
    """All start/end/unknown instants observed for one URL during a run."""

    url: str
    resource_type: ResourceType
    start_times: list[int] = field(default_factory=list)
    end_times: list[int] = field(default_factory=list)
    unknown_times: list[int] = field(default_factory=list)

    def sort(self) -> None:
        self.start_times.sort()
        self.end_times.sort()
        self.unknown_times.sort()


@dataclass(frozen=True, slots=True)
class CompletedRequest:
    """Reconciled request interval with a measured or estimated duration."""

    url: str
    resource_type: ResourceType
    start_time: int
    end_time: int
    estimated: bool = False

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(slots=True)
class IngestStats:
    """Counters for records and events that did not make it into the timeline."""

    records_seen: int = 0
    records_skipped: int = 0
    events_accepted: int = 0
    events_rejected: int = 0
    timestamp_failures: int = 0
    direct_timings: int = 0
    unanchored_timings: int = 0
