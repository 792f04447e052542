"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from typing import Any

from mcp_perf_log_server.core.analyzer import analyze_log_file
from mcp_perf_log_server.core.config import AnalysisConfig
from mcp_perf_log_server.core.models import CompletedRequest
from mcp_perf_log_server.core.timestamps import format_epoch_ms

HARD_TOP_N = 500


def _request_to_dict(request: CompletedRequest) -> dict[str, Any]:
    """Convert a CompletedRequest into a JSON-serializable dict."""
    return {
        "url": request.url,
        "type": request.resource_type.value,
        "start_time": format_epoch_ms(request.start_time),
        "end_time": format_epoch_ms(request.end_time),
        "duration": request.duration,
        "estimated": request.estimated,
    }


async def analyze_log_impl(
    *,
    log_path: str,
    top_n: int | None = None,
    include_requests: bool = False,
) -> dict[str, Any]:
    """Implementation for the `analyze_performance_log` MCP tool.

    Notes
    -----
    - top_n defaults to PERF_LOG_TOP_N (or 20) and is capped at HARD_TOP_N.
    - include_requests adds every completed request in construction order.
    """
    cfg: AnalysisConfig | None = None
    if top_n is not None:
        if top_n <= 0:
            raise ValueError("top_n must be > 0")
        cfg = AnalysisConfig(top_n=min(top_n, HARD_TOP_N))

    report, completed = await analyze_log_file(log_path, cfg=cfg)

    out = report.model_dump(mode="json")
    if include_requests:
        out["requests"] = [_request_to_dict(r) for r in completed]
    return out
