"""riskscope CLI interface.

Commands:
- analyze: Generate risk insights for a findings file
- check: Report which analysis backends are usable
- init: Initialize riskscope configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines for CI/CD
- --version: Show version and exit
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from riskscope import __version__
from riskscope.config import RiskscopeConfig, create_default_config, load_config
from riskscope.models.findings import Finding, Insight
from riskscope.utils.logging import ROOT_LOGGER, configure_from_cli

app = typer.Typer(
    name="riskscope",
    help="Dependency risk insights from issue-tracker findings",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: RiskscopeConfig | None = None
_logger = logging.getLogger(ROOT_LOGGER)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"riskscope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with timestamps"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress info messages (warnings and errors only)"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Enable CI mode with JSON log lines"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """riskscope - Dependency risk insights from issue-tracker findings."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, TypeError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def load_findings(path: Path) -> list[Finding]:
    """Load findings from a JSON file.

    Args:
        path: JSON file holding a list of findings

    Returns:
        Findings in file order

    Raises:
        ValueError: If the file is not a JSON list of findings
    """
    data = json.loads(path.read_text())
    if not isinstance(data, list):
        raise ValueError("Findings file must contain a JSON list")
    if not all(isinstance(item, dict) for item in data):
        raise ValueError("Each finding must be a JSON object")
    return [Finding.from_dict(item) for item in data]


def format_insights_text(insights: list[Insight]) -> str:
    """Format insights as plain text, one block per dependency."""
    blocks = []
    for insight in insights:
        header = f"== {insight.dependency_name} ({insight.version})"
        if insight.failed:
            header += " [analysis failed]"
        blocks.append(f"{header}\n{insight.analysis}")
    return "\n\n".join(blocks)


# =============================================================================
# analyze command
# =============================================================================


@app.command()
def analyze(
    findings_file: Annotated[
        Path,
        typer.Argument(
            help="JSON file with findings (dependency + issues)",
            exists=True,
            dir_okay=False,
        ),
    ],
    backend: Annotated[
        str | None,
        typer.Option(
            "--backend",
            "-b",
            help="Backend: auto, gemini_api, gemini_cli, gh_models, litellm, none",
        ),
    ] = None,
    batch_size: Annotated[
        int | None,
        typer.Option("--batch-size", help="Findings per backend call (overrides config)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output insights as JSON"),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write insights to this file instead of stdout"),
    ] = None,
) -> None:
    """Generate risk insights for dependencies with reported issues.

    Exit codes:
        0: Analysis completed (including when there was nothing to analyze)
        1: Fatal error (bad input or configuration)
        2: Completed, but at least one batch fell back to placeholder text
    """
    from dataclasses import replace

    from riskscope.engine import InsightEngine
    from riskscope.llm.backends import BackendConfigError

    config = _config or RiskscopeConfig()

    try:
        analysis_config = config.analysis
        if backend is not None or batch_size is not None:
            analysis_config = replace(
                analysis_config,
                backend=backend if backend is not None else analysis_config.backend,
                batch_size=batch_size if batch_size is not None else analysis_config.batch_size,
            )
        findings = load_findings(findings_file)
    except (ValueError, TypeError) as e:
        _logger.error(f"Invalid input: {e}")
        raise typer.Exit(1)

    _logger.info(f"Loaded {len(findings)} findings from {findings_file}")

    try:
        report = InsightEngine(analysis_config).analyze(findings)
    except (BackendConfigError, ValueError) as e:
        _logger.error(f"Analysis failed: {e}")
        raise typer.Exit(1)

    use_json = json_output or config.output.format == "json"
    if use_json:
        rendered = json.dumps([i.to_dict() for i in report.insights], indent=2)
    else:
        rendered = format_insights_text(report.insights)

    output_path = output or (Path(config.output.path) if config.output.path else None)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered + "\n")
        _logger.info(f"Insights written to: {output_path}")
    elif rendered:
        typer.echo(rendered)

    if report.has_failures:
        raise typer.Exit(2)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON"),
    ] = False,
) -> None:
    """Report which analysis backends are usable.

    Exit codes:
        0: At least one backend is usable
        1: No backend is usable
    """
    from riskscope.utils.preflight import PreflightChecker

    config = _config or RiskscopeConfig()
    checker = PreflightChecker(timeout=config.analysis.probe_timeout)
    result = checker.check_backends(config.analysis)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo("\nBackend Check Results\n")
        for check_result in result.checks:
            status = "ok " if check_result.available else "-- "
            version_str = f" ({check_result.version})" if check_result.version else ""
            typer.echo(f"  {status}{check_result.name}{version_str}")
            if check_result.available and check_result.path:
                typer.echo(f"     └─ {check_result.path}")
            typer.echo(f"     └─ {check_result.message}")
        typer.echo()

    if not result.any_available:
        if not json_output:
            typer.echo("No analysis backend available")
        raise typer.Exit(1)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Initialize riskscope configuration in ./.riskscope/config.yaml."""
    config_dir = Path(".riskscope")
    config_dir.mkdir(exist_ok=True)
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config())
    typer.echo(f"Created {config_file}")
