"""Configuration parsing from ``.slowpoke.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".slowpoke.yml"

DEFAULT_SLOW_THRESHOLD_MS = 500
DEFAULT_MAX_NAME_WIDTH = 50
_MIN_NAME_WIDTH = 10

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_TRUTHY = {"1", "true", "yes"}


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        else:
            result[key] = value
    return result


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return default


@dataclass
class AnalyzerConfig:
    """Report configuration."""

    slow_threshold_ms: int = DEFAULT_SLOW_THRESHOLD_MS
    """Tests slower than this many milliseconds are flagged as slow."""

    use_colors: bool = True
    """Colour slow and fast rows in the terminal report."""

    show_statistics: bool = True
    """Print the statistics block above the duration table."""

    show_groups: bool = True
    """Print the per-group duration breakdown."""

    max_name_width: int = DEFAULT_MAX_NAME_WIDTH
    """Test names longer than this are truncated in the table."""


def load_config(root: str | Path) -> AnalyzerConfig:
    """Load ``.slowpoke.yml`` from *root*, falling back to defaults.

    The ``report`` section holds the settings.  ``SLOWPOKE_THRESHOLD_MS``
    and ``SLOWPOKE_NO_COLOR`` override file values.
    """
    config_file = Path(root).resolve() / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)

    report_raw = raw.get("report", {})
    if not isinstance(report_raw, dict):
        report_raw = {}

    threshold = report_raw.get("slow_threshold_ms", DEFAULT_SLOW_THRESHOLD_MS)
    env_threshold = os.environ.get("SLOWPOKE_THRESHOLD_MS")
    if env_threshold:
        threshold = env_threshold

    use_colors = _as_bool(report_raw.get("use_colors", True), default=True)
    if _as_bool(os.environ.get("SLOWPOKE_NO_COLOR", ""), default=False):
        use_colors = False

    try:
        slow_threshold_ms = int(threshold)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid slow_threshold_ms %r, using %d", threshold, DEFAULT_SLOW_THRESHOLD_MS
        )
        slow_threshold_ms = DEFAULT_SLOW_THRESHOLD_MS

    try:
        max_name_width = int(report_raw.get("max_name_width", DEFAULT_MAX_NAME_WIDTH))
    except (TypeError, ValueError):
        max_name_width = DEFAULT_MAX_NAME_WIDTH

    return AnalyzerConfig(
        slow_threshold_ms=slow_threshold_ms,
        use_colors=use_colors,
        show_statistics=_as_bool(report_raw.get("show_statistics", True), default=True),
        show_groups=_as_bool(report_raw.get("show_groups", True), default=True),
        max_name_width=max_name_width,
    )


def validate_config(config: AnalyzerConfig) -> list[str]:
    """Return a list of validation errors (empty when valid)."""
    errors: list[str] = []
    if config.slow_threshold_ms < 0:
        errors.append(
            f"report.slow_threshold_ms must be >= 0, got {config.slow_threshold_ms}"
        )
    if config.max_name_width < _MIN_NAME_WIDTH:
        errors.append(
            f"report.max_name_width must be >= {_MIN_NAME_WIDTH}, got {config.max_name_width}"
        )
    return errors
