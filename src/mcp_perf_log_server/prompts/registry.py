"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def summarize_resource(uri: str) -> list[dict[str, Any]]:
        """Build a prompt that summarizes a resource URI."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a precise assistant. Summarize the provided resource clearly and "
                    "concisely. Extract key points, risks, and actionable items."
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Summarize this resource:"},
                    {"type": "resource", "uri": uri},
                ],
            },
        ]

    @mcp.prompt()
    def review_performance_log(log_path: str, top_n: int = 10) -> list[dict[str, Any]]:
        """Build a prompt for a page-load performance review."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a web performance engineer. Explain page-load timing data "
                    "concisely and ground every claim in the analysis output. "
                    "Do not invent numbers; if the data is insufficient, say so."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Review the performance log using analyze_performance_log. "
                    "Follow this workflow:\n"
                    "- Call analyze_performance_log first with the parameters below.\n"
                    "- If summary.completed_requests is 0, say so and check "
                    "diagnostics for skipped records or timestamp failures.\n"
                    "- Mention when durations are estimated (estimated_requests, "
                    "estimated flags on resources).\n"
                    "- Duplicate loads exclude probable API preflight pairs; treat them "
                    "as candidates, not proof.\n\n"
                    "Call analyze_performance_log with:\n"
                    f"- log_path: {log_path}\n"
                    f"- top_n: {top_n}\n\n"
                    "Return this structure:\n"
                    "1) Score and grade, with the weakest components\n"
                    "2) Wall-clock vs cumulative time and parallel efficiency\n"
                    "3) Slowest resources (up to 5, with type and duration)\n"
                    "4) Duplicate loads, if any\n"
                    "5) Next actions (2-4 bullets, highest priority first)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Optional: if you need raw context, you can read the log via:",
                    },
                    {"type": "resource", "uri": f"file://{log_path}"},
                ],
            },
        ]
