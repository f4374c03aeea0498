"""JSON reporter: machine-readable duration reports.

Produces a single JSON document with the statistics snapshot and every
test ranked slowest first, for downstream tooling.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from slowpoke.events import LineOutcome

if TYPE_CHECKING:
    from pathlib import Path

    from slowpoke.analyzer import AnalysisResult
    from slowpoke.config import AnalyzerConfig

logger = logging.getLogger(__name__)


class JSONReporter:
    """Generate structured JSON reports from an analysis result."""

    def generate(self, output_path: Path, result: AnalysisResult, config: AnalyzerConfig) -> Path:
        """Write a JSON report file.

        Args:
            output_path: Path to write the JSON file.
            result: The analysis to serialize.
            config: Supplies the slow-test threshold.

        Returns:
            The path to the generated JSON file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.generate_string(result, config), encoding="utf-8")
        logger.info("JSON report written to %s", output_path)
        return output_path

    def generate_string(self, result: AnalysisResult, config: AnalyzerConfig) -> str:
        """Return the JSON report as a string."""
        report = _build_report(result, config)
        return json.dumps(report, indent=2, ensure_ascii=False)


def _build_report(result: AnalysisResult, config: AnalyzerConfig) -> dict[str, Any]:
    threshold = config.slow_threshold_ms
    return {
        "tool": "slowpoke",
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "threshold_ms": threshold,
        "statistics": asdict(result.statistics),
        "tests": [
            {
                "name": name,
                "duration_ms": duration,
                "slow": duration > threshold,
                "groups": list(result.groups.get(name, ())),
            }
            for name, duration in result.ranked
        ],
        "skipped": {
            outcome.value: count
            for outcome, count in result.outcomes.items()
            if outcome is not LineOutcome.APPLIED
        },
        "duplicate_names": result.duplicate_names,
    }
