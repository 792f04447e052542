"""Analysis configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

TOP_N_ENV = "PERF_LOG_TOP_N"
DEFAULT_TOP_N = 20


@dataclass(frozen=True, slots=True)
class AnalysisConfig:
    top_n: int = DEFAULT_TOP_N

    # Input decoding for file-based sources.
    encoding: str = "utf-8"
    decode_errors: str = "replace"

    # Lines sampled when deciding whether a file is JSON or text.
    sniff_lines: int = 20


def resolve_analysis_config(cfg: AnalysisConfig | None = None) -> AnalysisConfig:
    """Return the given config, or the defaults with env overrides applied.

    An explicit config always wins; ``PERF_LOG_TOP_N`` only replaces the default.
    """
    if cfg is not None:
        if cfg.top_n < 1:
            raise ValueError("top_n must be >= 1")
        return cfg

    env = os.getenv(TOP_N_ENV)
    if env is None or env == "":
        return AnalysisConfig()

    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{TOP_N_ENV} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{TOP_N_ENV} must be >= 1")
    return AnalysisConfig(top_n=value)
