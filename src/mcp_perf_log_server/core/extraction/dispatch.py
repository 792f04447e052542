"""Shape-based dispatch from raw records to the matching extractor."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from ..models import IngestStats, RawRecord
from .arrays import ArrayRecordExtractor
from .base import Fact, RecordExtractor, RecordShape, classify_record
from .flat import FlatObjectExtractor
from .payload import NestedPayloadExtractor
from .text import TextLineExtractor


def default_extractors() -> dict[RecordShape, RecordExtractor]:
    """Default extractor per record shape."""
    arrays = ArrayRecordExtractor()
    return {
        RecordShape.NESTED_PAYLOAD: NestedPayloadExtractor(),
        RecordShape.FLAT_OBJECT: FlatObjectExtractor(),
        RecordShape.ARRAY_QUAD: arrays,
        RecordShape.ARRAY_TRIPLE: arrays,
        RecordShape.TEXT_LINE: TextLineExtractor(),
    }


@dataclass(frozen=True, slots=True)
class RecordDispatcher:
    """Classify each record once and hand it to the extractor for its shape."""

    extractors: Mapping[RecordShape, RecordExtractor] = field(default_factory=default_extractors)

    def extract(self, record: RawRecord, *, stats: IngestStats) -> Iterator[Fact]:
        """Yield every fact found in the record; unsupported shapes yield nothing."""
        extractor = self.extractors.get(classify_record(record))
        if extractor is None:
            return
        yield from extractor.extract(record, stats=stats)


def extract(record: RawRecord, *, stats: IngestStats | None = None) -> list[Fact]:
    """Extract all facts from a single record with the default extractors."""
    return list(RecordDispatcher().extract(record, stats=stats or IngestStats()))
