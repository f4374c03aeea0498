"""Reporters for outputting duration analyses."""

from __future__ import annotations

from slowpoke.reporters.json_reporter import JSONReporter
from slowpoke.reporters.terminal import TerminalReporter

__all__ = [
    "JSONReporter",
    "TerminalReporter",
]
