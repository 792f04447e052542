from __future__ import annotations

import gzip
import json
from pathlib import Path

import pytest

from mcp_perf_log_server.core.analyzer import analyze_log_file
from mcp_perf_log_server.core.log_source import (
    SourceFormat,
    iter_records,
    load_records,
    sniff_source,
    unwrap_document,
)


@pytest.mark.asyncio
async def test_json_array_document(tmp_path: Path, write_json) -> None:
    path = tmp_path / "perf.json"
    records = [["2025-01-01T00:00:00.000Z", "+", 1, "https://x.com/a.js"], {"url": "u"}]
    write_json(path, records)

    assert await sniff_source(path) is SourceFormat.JSON_DOCUMENT
    assert await load_records(path) == records


@pytest.mark.asyncio
async def test_pretty_printed_wrapper_object(tmp_path: Path) -> None:
    path = tmp_path / "perf.json"
    path.write_text(json.dumps({"entries": [{"url": "a"}, {"url": "b"}]}, indent=2), encoding="utf-8")

    assert await sniff_source(path) is SourceFormat.JSON_DOCUMENT
    assert await load_records(path) == [{"url": "a"}, {"url": "b"}]


def test_unwrap_document() -> None:
    assert unwrap_document({"logs": "nope", "data": [1, 2]}) == [1, 2]
    assert unwrap_document({"url": "a"}) == [{"url": "a"}]
    assert unwrap_document([{"url": "a"}]) == [{"url": "a"}]


@pytest.mark.asyncio
async def test_json_lines(tmp_path: Path, write_lines) -> None:
    path = tmp_path / "perf.jsonl"
    write_lines(
        path,
        [
            json.dumps({"url": "a", "timestamp": 1}),
            "",
            json.dumps({"url": "b", "timestamp": 2}),
        ],
    )

    assert await sniff_source(path) is SourceFormat.JSON_LINES
    assert await load_records(path) == [
        {"url": "a", "timestamp": 1},
        {"url": "b", "timestamp": 2},
    ]


@pytest.mark.asyncio
async def test_json_lines_keep_undecodable_lines_as_text(tmp_path: Path, write_lines) -> None:
    path = tmp_path / "perf.jsonl"
    write_lines(path, ['{"url": "a"}', '{"url": "b"}', '{"url": "c"', "42"])

    records = await load_records(path, source_format=SourceFormat.JSON_LINES)

    assert records == [{"url": "a"}, {"url": "b"}, '{"url": "c"', "42"]


@pytest.mark.asyncio
async def test_json_lines_of_arrays(tmp_path: Path, write_lines) -> None:
    path = tmp_path / "perf.jsonl"
    lines = [
        ["2025-01-01T00:00:00.000Z", "+", 1, "https://x.com/a.js"],
        ["2025-01-01T00:00:00.500Z", "-", 1, "https://x.com/a.js"],
    ]
    write_lines(path, [json.dumps(line) for line in lines])

    assert await sniff_source(path) is SourceFormat.JSON_LINES
    assert await load_records(path) == lines

    report, _ = await analyze_log_file(path)
    assert report.summary.completed_requests == 1
    assert report.top_resources[0].duration == 500


@pytest.mark.asyncio
async def test_single_line_array_is_still_a_document(tmp_path: Path, write_lines) -> None:
    path = tmp_path / "perf.json"
    write_lines(path, [json.dumps([["2025-01-01T00:00:00.000Z", "+", 1, "https://x.com/a.js"]])])

    assert await sniff_source(path) is SourceFormat.JSON_DOCUMENT
    assert len(await load_records(path)) == 1


@pytest.mark.asyncio
async def test_text_lines(tmp_path: Path, write_text_log) -> None:
    path = tmp_path / "perf.log"
    write_text_log(path)

    records = [r async for r in iter_records(path)]

    assert await sniff_source(path) is SourceFormat.TEXT
    assert len(records) == 6
    assert records[0] == "2025-01-01T00:00:00.000Z + 1 https://x.com/static/app.js"


@pytest.mark.asyncio
async def test_invalid_json_document_falls_back_to_text(tmp_path: Path, write_lines) -> None:
    path = tmp_path / "perf.json"
    write_lines(path, ["[", "2025-01-01T00:00:00.000Z + 1 https://x.com/a.js"])

    records = await load_records(path)

    assert records == ["[", "2025-01-01T00:00:00.000Z + 1 https://x.com/a.js"]


@pytest.mark.asyncio
async def test_gzip_json_lines(tmp_path: Path) -> None:
    path = tmp_path / "perf.jsonl.gz"
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write('{"url": "a"}\n{"url": "b"}\n')

    assert await load_records(path) == [{"url": "a"}, {"url": "b"}]


@pytest.mark.asyncio
async def test_empty_file_is_text_with_no_records(tmp_path: Path) -> None:
    path = tmp_path / "empty.log"
    path.write_text("", encoding="utf-8")

    assert await sniff_source(path) is SourceFormat.TEXT
    assert await load_records(path) == []


@pytest.mark.asyncio
async def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await load_records(tmp_path / "missing.log")
