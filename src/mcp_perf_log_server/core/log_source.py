"""Read raw records from log files (plain or gzip).

Three layouts are recognized:

* a JSON document: a top-level array of records, or an object whose
  ``logs``/``entries``/``requests``/``data``/``events`` key holds one
  (any other object is a single record);
* JSON lines: one record per line;
* plain text: one record (a ``str``) per non-blank line.

A JSON document that fails to decode is re-read as plain text.
"""

from __future__ import annotations

import gzip
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import Enum
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .models import RawRecord

logger = logging.getLogger(__name__)

WRAPPER_KEYS: tuple[str, ...] = ("logs", "entries", "requests", "data", "events")


class SourceFormat(str, Enum):
    JSON_DOCUMENT = "json_document"
    JSON_LINES = "json_lines"
    TEXT = "text"


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


def _check_path(log_path: str | Path) -> Path:
    path = Path(log_path)
    if not path.is_file():
        raise FileNotFoundError(f"Log file not found: {path}")
    return path


def _decodes_alone(line: str) -> bool:
    try:
        json.loads(line)
    except ValueError:
        return False
    return True


def unwrap_document(doc: object) -> list[RawRecord]:
    """Turn a decoded JSON document into a list of records."""
    if isinstance(doc, list):
        return doc
    if isinstance(doc, dict):
        for key in WRAPPER_KEYS:
            value = doc.get(key)
            if isinstance(value, list):
                logger.debug("Found %d records under %r", len(value), key)
                return value
    return [doc]


async def sniff_source(
    log_path: str | Path,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
    sample_lines: int = 20,
) -> SourceFormat:
    """Guess the file layout from its first non-blank lines."""
    path = _check_path(log_path)

    sample: list[str] = []
    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        async for line in f:
            line = line.strip()
            if not line:
                continue
            sample.append(line)
            if len(sample) >= sample_lines:
                break

    if not sample:
        return SourceFormat.TEXT

    if sample[0].startswith(("{", "[")):
        # A single complete object or array per line, more than one line.
        if len(sample) > 1 and all(
            s.startswith(("{", "[")) and _decodes_alone(s) for s in sample
        ):
            return SourceFormat.JSON_LINES
        return SourceFormat.JSON_DOCUMENT
    return SourceFormat.TEXT


async def iter_records(
    log_path: str | Path,
    *,
    encoding: str = "utf-8",
    decode_errors: str = "replace",
    sniff_lines: int = 20,
    source_format: SourceFormat | None = None,
) -> AsyncIterator[RawRecord]:
    """Yield raw records from a log file."""
    path = _check_path(log_path)
    if source_format is None:
        source_format = await sniff_source(
            path,
            encoding=encoding,
            decode_errors=decode_errors,
            sample_lines=sniff_lines,
        )
    logger.debug("Reading %s as %s", path, source_format.value)

    if source_format is SourceFormat.JSON_DOCUMENT:
        async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
            content = await f.read()
        try:
            doc = json.loads(content)
        except ValueError as exc:
            logger.warning("%s is not valid JSON (%s); reading it as text", path, exc)
        else:
            for record in unwrap_document(doc):
                yield record
            return
        for line in content.splitlines():
            if line.strip():
                yield line
        return

    async with _open_text(path, encoding=encoding, decode_errors=decode_errors) as f:
        async for line in f:
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            if source_format is SourceFormat.JSON_LINES:
                try:
                    record = json.loads(line)
                except ValueError:
                    yield line
                    continue
                if isinstance(record, (dict, list)):
                    yield record
                else:
                    yield line
            else:
                yield line


async def load_records(log_path: str | Path, **kwargs) -> list[RawRecord]:
    """Read all records from a log file into memory."""
    return [record async for record in iter_records(log_path, **kwargs)]
