"""
Configuration for the statement bundle analyzer.

Values come from dataclass defaults, then environment variables, then
command-line flags (applied by the CLI). There is no config file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Literal, get_args

from .errors import UsageError

logger = logging.getLogger(__name__)

AnalysisMode = Literal["per-file", "combined"]

DEFAULT_MODEL = "gpt-4"
DEFAULT_MAX_CHARS_PER_FILE = 8000
DEFAULT_TIMEOUT_S = 120.0

API_KEY_ENV = "OPENAI_API_KEY"
BASE_URL_ENV = "OPENAI_BASE_URL"
MODEL_ENV = "STMTBUNDLE_MODEL"
MAX_CHARS_ENV = "STMTBUNDLE_MAX_CHARS"
TIMEOUT_ENV = "STMTBUNDLE_TIMEOUT"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


@dataclass
class AnalyzerConfig:
    """
    Settings for one analyzer run.

    Modes:
    - "per-file": one completion per recognized file (default)
    - "combined": one completion for the whole bundle
    """

    model: str = DEFAULT_MODEL
    base_url: str | None = None  # None = SDK default (https://api.openai.com/v1)
    max_chars_per_file: int = DEFAULT_MAX_CHARS_PER_FILE
    max_files: int | None = None
    mode: AnalysisMode = "per-file"
    timeout_s: float = DEFAULT_TIMEOUT_S
    colors: bool = True

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Build a config from defaults overridden by environment variables."""
        return cls(
            model=os.environ.get(MODEL_ENV, "").strip() or DEFAULT_MODEL,
            base_url=os.environ.get(BASE_URL_ENV, "").strip() or None,
            max_chars_per_file=_env_int(MAX_CHARS_ENV, DEFAULT_MAX_CHARS_PER_FILE),
            timeout_s=_env_float(TIMEOUT_ENV, DEFAULT_TIMEOUT_S),
        )

    def validate(self) -> None:
        """Reject settings no run can use."""
        if self.mode not in get_args(AnalysisMode):
            raise UsageError(f"unknown analysis mode {self.mode!r}")
        if not self.model:
            raise UsageError("model must not be empty")
        if self.max_chars_per_file <= 0:
            raise UsageError(f"max_chars_per_file must be positive, got {self.max_chars_per_file}")
        if self.max_files is not None and self.max_files <= 0:
            raise UsageError(f"max_files must be positive, got {self.max_files}")
        if self.timeout_s <= 0:
            raise UsageError(f"timeout_s must be positive, got {self.timeout_s}")


# Default configuration instance
default_config = AnalyzerConfig()


__all__ = [
    "API_KEY_ENV",
    "AnalysisMode",
    "AnalyzerConfig",
    "DEFAULT_MODEL",
    "default_config",
]
