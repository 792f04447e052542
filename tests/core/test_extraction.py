from __future__ import annotations

import json

import pytest

from mcp_perf_log_server.core.extraction import (
    RecordShape,
    classify_record,
    extract,
    normalize_action,
)
from mcp_perf_log_server.core.models import DirectTiming, EventKind, IngestStats, ResourceEvent

BASE_MS = 1_735_689_600_000
URL = "https://x.com/static/app.js"


@pytest.mark.parametrize(
    ("record", "shape"),
    [
        ({"textPayload": "[1, 2, 3]"}, RecordShape.NESTED_PAYLOAD),
        ({"textPayload": "  "}, RecordShape.FLAT_OBJECT),
        ({"url": URL}, RecordShape.FLAT_OBJECT),
        (["t", "+", 1, URL], RecordShape.ARRAY_QUAD),
        (["t", URL, 10], RecordShape.ARRAY_TRIPLE),
        (["t", URL], RecordShape.UNSUPPORTED),
        ("2025-01-01T00:00:00.000Z + 1 " + URL, RecordShape.TEXT_LINE),
        (42, RecordShape.UNSUPPORTED),
    ],
)
def test_classify_record(record: object, shape: RecordShape) -> None:
    assert classify_record(record) is shape


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        ("+", EventKind.START),
        ("Start", EventKind.START),
        ("request_start", EventKind.START),
        ("-", EventKind.END),
        ("FINISH", EventKind.END),
        ("GET", EventKind.UNKNOWN),
        (None, EventKind.UNKNOWN),
    ],
)
def test_normalize_action(value: object, kind: EventKind) -> None:
    assert normalize_action(value) is kind


def test_nested_payload_quad_array() -> None:
    record = {
        "textPayload": json.dumps(["2025-01-01T00:00:00.250Z", "+", 3, URL]),
        "timestamp": "2025-01-01T00:00:09.000Z",
    }

    assert extract(record) == [
        ResourceEvent(url=URL, timestamp_ms=BASE_MS + 250, kind=EventKind.START)
    ]


def test_nested_payload_triple_array_is_direct_timing() -> None:
    record = {"textPayload": json.dumps(["2025-01-01T00:00:00.000Z", URL, 420])}

    assert extract(record) == [DirectTiming(url=URL, start_ms=BASE_MS, duration_ms=420)]


def test_nested_payload_falls_back_to_envelope_timestamps() -> None:
    stats = IngestStats()
    record = {
        "textPayload": json.dumps(["garbage", "-", 3, URL]),
        "timestamp": "",
        "receiveTimestamp": "2025-01-01T00:00:01.000Z",
    }

    facts = extract(record, stats=stats)

    assert facts == [ResourceEvent(url=URL, timestamp_ms=BASE_MS + 1000, kind=EventKind.END)]
    assert stats.timestamp_failures == 1


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (
            "+ 3 " + URL,
            ResourceEvent(url=URL, timestamp_ms=BASE_MS, kind=EventKind.START),
        ),
        (
            "2025-01-01T00:00:00.750Z - 3 " + URL,
            ResourceEvent(url=URL, timestamp_ms=BASE_MS + 750, kind=EventKind.END),
        ),
        (
            URL + " 420ms",
            DirectTiming(url=URL, start_ms=BASE_MS, duration_ms=420),
        ),
    ],
)
def test_nested_payload_text_patterns(payload: str, expected: object) -> None:
    record = {"textPayload": payload, "timestamp": "2025-01-01T00:00:00.000Z"}

    assert extract(record) == [expected]


def test_unrecognized_payload_is_read_as_flat_object() -> None:
    record = {
        "textPayload": "hello world",
        "url": URL,
        "timestamp": "2025-01-01T00:00:00.000Z",
        "action": "begin",
    }

    assert extract(record) == [
        ResourceEvent(url=URL, timestamp_ms=BASE_MS, kind=EventKind.START)
    ]


def test_flat_object_field_fallbacks() -> None:
    record = {"uri": URL, "timestamp": 0, "time": BASE_MS, "type": "end"}

    assert extract(record) == [ResourceEvent(url=URL, timestamp_ms=BASE_MS, kind=EventKind.END)]


def test_flat_object_url_object_with_href() -> None:
    record = {"url": {"href": URL}, "ts": "2025-01-01T00:00:00.000Z"}

    assert extract(record) == [
        ResourceEvent(url=URL, timestamp_ms=BASE_MS, kind=EventKind.UNKNOWN)
    ]


def test_flat_object_with_duration_and_no_timestamp() -> None:
    assert extract({"url": "https://x.com/b.png", "duration": 300}) == [
        DirectTiming(url="https://x.com/b.png", start_ms=None, duration_ms=300)
    ]


@pytest.mark.parametrize(
    "record",
    [
        {"url": URL},
        {"url": URL, "duration": 0},
        {"url": "null", "timestamp": "2025-01-01T00:00:00.000Z"},
        {"url": "", "timestamp": "2025-01-01T00:00:00.000Z"},
        {"timestamp": "2025-01-01T00:00:00.000Z", "action": "start"},
        ["2025-01-01T00:00:00.000Z", URL],
        42,
    ],
)
def test_unusable_records_yield_nothing(record: object) -> None:
    assert extract(record) == []


def test_bare_array_records() -> None:
    assert extract(["2025-01-01T00:00:00.000Z", "+", 1, URL]) == [
        ResourceEvent(url=URL, timestamp_ms=BASE_MS, kind=EventKind.START)
    ]
    assert extract(["2025-01-01T00:00:00.000Z", URL, 80]) == [
        DirectTiming(url=URL, start_ms=BASE_MS, duration_ms=80)
    ]


def test_text_line_markers() -> None:
    assert extract("2025-01-01T00:00:00.100Z + 7 " + URL) == [
        ResourceEvent(url=URL, timestamp_ms=BASE_MS + 100, kind=EventKind.START)
    ]
    assert extract("2025-01-01T00:00:00.900Z - 7 " + URL) == [
        ResourceEvent(url=URL, timestamp_ms=BASE_MS + 900, kind=EventKind.END)
    ]


def test_text_line_url_mentions_are_unknown_events() -> None:
    facts = extract("2025-01-01T00:00:00.000Z fetched https://x.com/a.png and https://x.com/b.png")

    assert [f.url for f in facts] == ["https://x.com/a.png", "https://x.com/b.png"]
    assert {f.kind for f in facts} == {EventKind.UNKNOWN}


def test_text_line_quoted_path() -> None:
    facts = extract('2025-01-01T00:00:00.000Z loading "/assets/logo.png"')

    assert facts == [
        ResourceEvent(url="/assets/logo.png", timestamp_ms=BASE_MS, kind=EventKind.UNKNOWN)
    ]


def test_text_line_without_leading_timestamp_is_skipped() -> None:
    assert extract("+ 7 " + URL) == []
    assert extract("INFO 2025-01-01T00:00:00.000Z + 7 " + URL) == []
