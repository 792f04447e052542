"""Entry extraction for heterogeneous performance-log records.

Contains extractors for telemetry envelopes, flat objects, bare arrays and
text lines, plus the dispatcher that picks one per record shape.
"""

from __future__ import annotations

from .arrays import ArrayRecordExtractor
from .base import Fact, RecordExtractor, RecordShape, classify_record, normalize_action
from .dispatch import RecordDispatcher, default_extractors, extract
from .flat import FlatObjectExtractor
from .payload import NestedPayloadExtractor
from .text import TextLineExtractor

__all__ = [
    "ArrayRecordExtractor",
    "Fact",
    "FlatObjectExtractor",
    "NestedPayloadExtractor",
    "RecordDispatcher",
    "RecordExtractor",
    "RecordShape",
    "TextLineExtractor",
    "classify_record",
    "default_extractors",
    "extract",
    "normalize_action",
]
