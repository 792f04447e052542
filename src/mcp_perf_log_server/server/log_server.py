"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (analyze a performance log file)
- Resources: addressable data blobs (report schema, sample log, log files)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_perf_log_server.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_perf_log_server.prompts.registry import register_prompts
from mcp_perf_log_server.resources.registry import register_resources
from mcp_perf_log_server.tools.analyze import analyze_log_impl

LOGGER = logging.getLogger(__name__)

LOG_LEVEL_ENV = "PERF_LOG_LOG_LEVEL"


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("perf-log", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def analyze_performance_log(
    log_path: str,
    top_n: int | None = None,
    include_requests: bool = False,
) -> dict[str, Any]:
    """Analyze a resource-loading log and return a performance report.

    Parameters
    ----------
    log_path:
        Path to a local log file: a JSON document, JSON lines or timestamped
        text lines. Supports .gz.
    top_n:
        Number of slowest resources to list (default 20, hard-capped).
    include_requests:
        Whether to include every completed request with its start/end time.

    Returns
    -------
    dict:
        {"summary", "top_resources", "type_stats", "type_totals", "duplicates",
         "recommendations", "score", "diagnostics"} plus "requests" on demand.
    """
    return await analyze_log_impl(
        log_path=log_path,
        top_n=top_n,
        include_requests=include_requests,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
