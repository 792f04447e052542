"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import asyncio
import gzip
import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_perf_log_server.core.event_store import DEFAULT_DURATIONS_MS, FALLBACK_DURATION_MS
from mcp_perf_log_server.core.report import PerformanceReport
from mcp_perf_log_server.core.scoring import DEFAULT_SUGGESTION, TYPE_SUGGESTIONS

ALLOWED_FILE_SUFFIXES = {".json", ".jsonl", ".log", ".txt"}
BASE_DIR_ENV = "PERF_LOG_BASE_DIR"
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"

SAMPLE_LOG = (
    "2025-06-03T04:19:29.591Z + 1 https://example.com/static/app.js\n"
    "2025-06-03T04:19:29.612Z + 2 https://example.com/static/site.css\n"
    "2025-06-03T04:19:29.803Z - 2 https://example.com/static/site.css\n"
    "2025-06-03T04:19:30.091Z - 1 https://example.com/static/app.js\n"
    "2025-06-03T04:19:30.120Z + 3 https://example.com/api/items\n"
    "2025-06-03T04:19:31.420Z - 3 https://example.com/api/items\n"
)


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _ensure_allowed_suffix(path: Path) -> None:
    """Validate the file suffix against the allowlist."""
    suffix = _allowed_suffix(path)
    if suffix not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")


def _resolve_resource_path(path: str) -> Path:
    """Resolve and validate a resource file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    _ensure_allowed_suffix(resolved)
    return resolved


def _read_text(path: Path) -> str:
    if path.suffix.lower() == ".gz":
        with gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            return f.read()
    return path.read_text(encoding=TEXT_ENCODING, errors=TEXT_ERRORS)


def type_suggestions() -> dict[str, Any]:
    """Remediation hints and estimation defaults per resource type."""
    return {
        "suggestions": {t.value: s for t, s in TYPE_SUGGESTIONS.items()},
        "default_suggestion": DEFAULT_SUGGESTION,
        "default_durations_ms": {t.value: ms for t, ms in DEFAULT_DURATIONS_MS.items()},
        "fallback_duration_ms": FALLBACK_DURATION_MS,
    }


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://perf-log/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        base = _base_dir()
        return (
            "Resources:\n"
            "- app://perf-log/help\n"
            "- app://perf-log/schemas/performance-report\n"
            "- app://perf-log/config/type-suggestions\n"
            "- app://perf-log/examples/sample-log\n"
            f"- file://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base}\n"
        )

    @mcp.resource("app://perf-log/examples/sample-log")
    def sample_log() -> str:
        """Return a tiny text-format performance log for demos and tests."""
        return SAMPLE_LOG

    @mcp.resource("app://perf-log/config/type-suggestions")
    def type_suggestions_resource() -> dict[str, Any]:
        """Return per-type suggestions and estimation defaults."""
        return type_suggestions()

    @mcp.resource("app://perf-log/schemas/performance-report")
    def report_schema() -> dict[str, Any]:
        """Return the JSON schema for analysis reports."""
        return PerformanceReport.model_json_schema()

    @mcp.resource("file://{path}")
    async def read_file(path: str) -> str:
        """Read a log file from within PERF_LOG_BASE_DIR."""
        p = _resolve_resource_path(path)
        return await asyncio.to_thread(_read_text, p)
