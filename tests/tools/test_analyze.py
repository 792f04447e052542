from __future__ import annotations

from pathlib import Path

import pytest

from mcp_perf_log_server.tools.analyze import HARD_TOP_N, analyze_log_impl


@pytest.mark.asyncio
async def test_analyze_log_impl_returns_json_report(tmp_path: Path, write_text_log) -> None:
    log = tmp_path / "perf.log"
    write_text_log(log)

    out = await analyze_log_impl(log_path=str(log))

    assert set(out) == {
        "summary",
        "top_resources",
        "type_stats",
        "type_totals",
        "duplicates",
        "recommendations",
        "score",
        "diagnostics",
    }
    assert out["summary"]["completed_requests"] == 2
    assert out["top_resources"][0]["url"] == "https://x.com/static/app.js"
    assert out["top_resources"][0]["type"] == "JavaScript"
    assert out["score"]["grade"] in {"A", "B", "C", "D", "F"}


@pytest.mark.asyncio
async def test_analyze_log_impl_top_n_and_requests(tmp_path: Path, write_text_log) -> None:
    log = tmp_path / "perf.log"
    write_text_log(log)

    out = await analyze_log_impl(log_path=str(log), top_n=1, include_requests=True)

    assert len(out["top_resources"]) == 1
    assert out["requests"] == [
        {
            "url": "https://x.com/static/app.js",
            "type": "JavaScript",
            "start_time": "2025-01-01T00:00:00.000Z",
            "end_time": "2025-01-01T00:00:00.900Z",
            "duration": 900,
            "estimated": False,
        },
        {
            "url": "https://x.com/static/site.css",
            "type": "CSS",
            "start_time": "2025-01-01T00:00:00.100Z",
            "end_time": "2025-01-01T00:00:00.400Z",
            "duration": 300,
            "estimated": False,
        },
    ]


@pytest.mark.asyncio
async def test_analyze_log_impl_caps_top_n(tmp_path: Path, write_json) -> None:
    log = tmp_path / "perf.json"
    write_json(
        log,
        [{"url": f"https://x.com/{i}.js", "duration": 10} for i in range(HARD_TOP_N + 5)],
    )

    out = await analyze_log_impl(log_path=str(log), top_n=HARD_TOP_N * 2)

    assert len(out["top_resources"]) == HARD_TOP_N
    assert out["summary"]["completed_requests"] == HARD_TOP_N + 5


@pytest.mark.asyncio
async def test_analyze_log_impl_rejects_bad_top_n(tmp_path: Path, write_text_log) -> None:
    log = tmp_path / "perf.log"
    write_text_log(log)

    with pytest.raises(ValueError):
        await analyze_log_impl(log_path=str(log), top_n=0)


@pytest.mark.asyncio
async def test_analyze_log_impl_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await analyze_log_impl(log_path=str(tmp_path / "nope.log"))
