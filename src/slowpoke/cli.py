"""slowpoke CLI: analyze a JSON test log and report slow tests."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import TypedDict, Unpack

import click
from rich.console import Console
from rich.logging import RichHandler

from slowpoke import __version__
from slowpoke.analyzer import AnalysisResult, analyze, read_log
from slowpoke.config import AnalyzerConfig, load_config, validate_config
from slowpoke.errors import NoTestDataError
from slowpoke.reporters import JSONReporter, TerminalReporter

logger = logging.getLogger(__name__)


class _AnalyzeKwargs(TypedDict):
    """Keyword arguments for the slowpoke command."""

    logfile: Path
    threshold: int | None
    no_color: bool
    no_stats: bool
    no_groups: bool
    as_json: bool
    output: Path | None
    config_root: Path
    verbose: bool


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _apply_overrides(config: AnalyzerConfig, kwargs: _AnalyzeKwargs) -> AnalyzerConfig:
    """Apply command-line flags on top of the file/environment config."""
    overrides: dict[str, object] = {}
    if kwargs["threshold"] is not None:
        overrides["slow_threshold_ms"] = kwargs["threshold"]
    if kwargs["no_color"]:
        overrides["use_colors"] = False
    if kwargs["no_stats"]:
        overrides["show_statistics"] = False
    if kwargs["no_groups"]:
        overrides["show_groups"] = False
    return replace(config, **overrides)


def _emit_json(result: AnalysisResult, config: AnalyzerConfig, output: Path | None) -> None:
    json_reporter = JSONReporter()
    if output is not None:
        json_reporter.generate(output, result, config)
        return
    click.echo(json_reporter.generate_string(result, config))


@click.command()
@click.argument(
    "logfile",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--threshold",
    type=int,
    default=None,
    help="Mark tests slower than this many milliseconds (default: 500).",
)
@click.option("--no-color", is_flag=True, help="Disable colored output.")
@click.option("--no-stats", is_flag=True, help="Hide the statistics block.")
@click.option("--no-groups", is_flag=True, help="Hide the per-group breakdown.")
@click.option("--json", "as_json", is_flag=True, help="Output a JSON report instead of tables.")
@click.option(
    "--output",
    "-o",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the JSON report to this file (implies --json).",
)
@click.option(
    "--config-root",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory containing .slowpoke.yml.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="slowpoke")
def cli(**kwargs: Unpack[_AnalyzeKwargs]) -> None:
    """Analyze test durations in a JSON test runner log.

    LOGFILE is a line-delimited JSON event log, for example the output of
    ``dart test --reporter json``.
    """
    _configure_logging(verbose=kwargs["verbose"])

    config = _apply_overrides(load_config(kwargs["config_root"]), kwargs)
    reporter = TerminalReporter(Console(no_color=not config.use_colors))

    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.Abort

    logfile = kwargs["logfile"]
    try:
        lines = read_log(logfile)
    except OSError as e:
        reporter.print_error(f"Error reading file: {e}")
        raise click.Abort from e

    try:
        result = analyze(lines)
    except NoTestDataError:
        reporter.print_no_data()
        raise click.Abort from None

    logger.debug("Analyzed %d tests from %s", result.statistics.count, logfile)

    if kwargs["as_json"] or kwargs["output"] is not None:
        _emit_json(result, config, kwargs["output"])
        return

    reporter.print_report(result, config)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
