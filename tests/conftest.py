from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_text_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "2025-01-01T00:00:00.000Z + 1 https://x.com/static/app.js",
                    "2025-01-01T00:00:00.100Z + 2 https://x.com/static/site.css",
                    "2025-01-01T00:00:00.400Z - 2 https://x.com/static/site.css",
                    "2025-01-01T00:00:00.900Z - 1 https://x.com/static/app.js",
                    "2025-01-01T00:00:01.000Z loading 'https://x.com/img/logo.png'",
                    "not a log line",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write


@pytest.fixture
def write_json() -> Callable[[Path, object], None]:
    def _write(path: Path, doc: object) -> None:
        path.write_text(json.dumps(doc), encoding="utf-8")

    return _write


@pytest.fixture
def write_lines() -> Callable[[Path, list[str]], None]:
    def _write(path: Path, lines: list[str]) -> None:
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")

    return _write
