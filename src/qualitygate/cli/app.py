"""Main CLI application entry point."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..config.admin_config import ServerConfig
from ..config.logging_config import setup_logging
from ..config.quality_config import QualityGateConfig, get_quality_config
from ..constants import HEALTH_FAILURE_EXIT_THRESHOLD
from ..exceptions import QualityGateError
from ..models.quality_models import (
    BuildMetricsRecord,
    CodeQualityMetrics,
    EvaluationResult,
    QualityMetrics,
    QualityThresholds,
    UnifiedQualityReport,
)
from ..quality.analyzers.code_quality_analyzer import CodeQualityAnalyzer
from ..quality.analyzers.metrics_measurer import MetricsMeasurer
from ..quality.gate_engine import QualityGateEngine
from ..quality.metrics_comparison import MetricsComparison
from ..quality.github_output import write_gate_outputs, write_metrics_outputs
from ..quality.report_generator import ReportGenerator
from ..quality.threshold_manager import ThresholdManager

logger = logging.getLogger(__name__)

console = Console()


class CLIState:
    """Options shared by all subcommands."""

    def __init__(self, config: QualityGateConfig, thresholds: QualityThresholds, verbose: bool):
        self.config = config
        self.thresholds = thresholds
        self.verbose = verbose


def load_thresholds(config: QualityGateConfig, project: Optional[str] = None) -> QualityThresholds:
    manager = ThresholdManager(config.thresholds_file)
    return manager.get_thresholds(project or config.project_name)


def _fail(state: CLIState, error: Exception) -> None:
    if state.verbose:
        logger.exception("CLI error")
    else:
        click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--project-root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Project to analyze (defaults to QUALITY_PROJECT_ROOT or cwd)",
)
@click.option(
    "--thresholds",
    "thresholds_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML or JSON threshold overrides",
)
@click.option("--project", help="Project key for per-project threshold overrides")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    project_root: Optional[Path],
    thresholds_file: Optional[Path],
    project: Optional[str],
) -> None:
    """
    Quality gate - measure, score and gate a web project.

    Evaluate the gate (exit 1 on failure):
        quality-gate gate

    Build the unified report:
        quality-gate report
    """
    setup_logging(verbose)

    config = get_quality_config(
        project_root=project_root,
        thresholds_file=thresholds_file,
        project_name=project,
    )
    ctx.obj = CLIState(config, load_thresholds(config), verbose)


def render_gate(metrics: QualityMetrics, result: EvaluationResult) -> None:
    table = Table(title="Quality Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("TypeScript errors", str(metrics.type_errors))
    table.add_row("ESLint errors", str(metrics.lint_errors))
    table.add_row("ESLint warnings", str(metrics.lint_warnings))
    if metrics.coverage is not None:
        table.add_row("Coverage", f"{metrics.coverage:.1f}%")
    if metrics.build_time is not None:
        table.add_row("Build time", f"{metrics.build_time / 1000:.1f}s")
    if metrics.test_time is not None:
        table.add_row("Test time", f"{metrics.test_time / 1000:.1f}s")
    if metrics.bundle_size is not None:
        table.add_row("Build size", f"{metrics.bundle_size / 1024 / 1024:.2f}MB")
    if metrics.complexity is not None:
        table.add_row("Average complexity", f"{metrics.complexity.average:.1f}")
    console.print(table)

    for failure in result.failures:
        console.print(f"[red]{failure}[/red]")
    for warning in result.warnings:
        console.print(f"[yellow]{warning}[/yellow]")

    if result.passed:
        console.print("[bold green]✅ Quality gate PASSED[/bold green]")
    else:
        console.print("[bold red]❌ Quality gate FAILED[/bold red]")


@main.command()
@click.option("--skip-complexity", is_flag=True, help="Skip source complexity analysis")
@click.pass_obj
def gate(state: CLIState, skip_complexity: bool) -> None:
    """Collect metrics and evaluate the quality gate."""
    engine = QualityGateEngine(
        state.config, state.thresholds, check_complexity=not skip_complexity
    )
    try:
        metrics, result = asyncio.run(engine.run())
    except QualityGateError as e:
        _fail(state, e)
        return

    render_gate(metrics, result)
    write_gate_outputs(result)
    sys.exit(0 if result.passed else 1)


def render_report(report: UnifiedQualityReport) -> None:
    table = Table(title="Unified Quality Report")
    table.add_column("Score", style="cyan")
    table.add_column("Value", justify="right")
    for key, value in report.scores.items():
        table.add_row(key, f"{value:.0f}")
    if report.weighted_score is not None:
        table.add_row("weighted", str(report.weighted_score))
    console.print(table)

    colour = "green" if report.health_score >= 80 else "yellow" if report.health_score >= 60 else "red"
    console.print(f"[bold {colour}]Health score: {report.health_score}/100[/bold {colour}]")
    for recommendation in report.recommendations:
        console.print(f"  {recommendation}")


@main.command()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Where to write unified-report.json/.md (defaults to the metrics dir)",
)
@click.pass_obj
def report(state: CLIState, output_dir: Optional[Path]) -> None:
    """Generate the unified quality report (exit 1 when health is critical)."""
    generator = ReportGenerator(
        state.config, state.thresholds, str(output_dir) if output_dir else None
    )
    try:
        unified = asyncio.run(generator.generate_and_save())
    except QualityGateError as e:
        _fail(state, e)
        return

    render_report(unified)
    sys.exit(1 if unified.health_score < HEALTH_FAILURE_EXIT_THRESHOLD else 0)


def render_analysis(metrics: CodeQualityMetrics) -> None:
    table = Table(title="Code Quality Analysis")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Average complexity", f"{metrics.complexity.average_complexity:.1f}")
    table.add_row("Max complexity", f"{metrics.complexity.max_complexity:.0f}")
    table.add_row(
        "Maintainability",
        f"{metrics.maintainability.index:.1f} ({metrics.maintainability.rating})",
    )
    if metrics.duplication is not None:
        table.add_row("Duplication", f"{metrics.duplication.percentage:.1f}%")
    table.add_row("Files", str(metrics.file_metrics.total_files))
    table.add_row("Large files", str(len(metrics.file_metrics.large_files)))
    console.print(table)


@main.command()
@click.option("--exclude-ui", is_flag=True, help="Exclude generated UI components")
@click.pass_obj
def analyze(state: CLIState, exclude_ui: bool) -> None:
    """Analyze complexity, maintainability and duplication."""
    analyzer = CodeQualityAnalyzer(state.config, include_ui_components=not exclude_ui)
    try:
        metrics = asyncio.run(analyzer.analyze())
    except QualityGateError as e:
        _fail(state, e)
        return

    path = analyzer.save(metrics)
    render_analysis(metrics)
    console.print(f"Saved to {path}")


def render_measurements(record: BuildMetricsRecord) -> None:
    table = Table(title="Build Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    if record.build_time is not None:
        table.add_row("Build time", f"{record.build_time / 1000:.1f}s")
    if record.test_time is not None:
        table.add_row("Test time", f"{record.test_time / 1000:.1f}s")
    if record.bundle_size is not None:
        table.add_row("Bundle size", f"{record.bundle_size.total / 1024 / 1024:.2f}MB")
    first_load = record.first_load_js_summary()
    if first_load is not None:
        table.add_row("First Load JS", f"{first_load.max:.1f}KB ({first_load.max_route})")
    console.print(table)


@main.command()
@click.option("--build", "do_build", is_flag=True, help="Measure build time")
@click.option("--test", "do_test", is_flag=True, help="Measure test time")
@click.option("--bundle", "do_bundle", is_flag=True, help="Measure build output size")
@click.pass_obj
def measure(state: CLIState, do_build: bool, do_test: bool, do_bundle: bool) -> None:
    """Measure build time, test time and bundle size (all when no flag is given)."""
    if not (do_build or do_test or do_bundle):
        do_build = do_test = do_bundle = True

    measurer = MetricsMeasurer(state.config)
    try:
        record = asyncio.run(measurer.measure(build=do_build, test=do_test, bundle=do_bundle))
    except QualityGateError as e:
        _fail(state, e)
        return

    path = measurer.save(record)
    write_metrics_outputs(record)
    render_measurements(record)
    console.print(f"Saved to {path}")


@main.command()
@click.option("--host", help="Bind address (defaults to QUALITY_API_HOST)")
@click.option("--port", type=int, help="Bind port (defaults to QUALITY_API_PORT)")
@click.pass_obj
def serve(state: CLIState, host: Optional[str], port: Optional[int]) -> None:
    """Run the admin, health and metrics HTTP API."""
    import uvicorn

    from ..api.app import create_app

    server_config = ServerConfig()
    uvicorn.run(
        create_app(server_config=server_config),
        host=host or server_config.host,
        port=port or server_config.port,
        log_level="debug" if state.verbose else "info",
    )


@main.command()
@click.option(
    "--base-sha",
    help="Base commit whose metrics/base-<sha>.json is compared (defaults to GITHUB_BASE_SHA)",
)
@click.option(
    "--base-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Explicit base metrics record",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the report (defaults to metrics/report.md)",
)
@click.pass_obj
def compare(
    state: CLIState, base_sha: Optional[str], base_file: Optional[Path], output: Optional[Path]
) -> None:
    """Compare the latest build metrics with the base branch."""
    comparison = MetricsComparison(state.config, state.thresholds)
    try:
        markdown = comparison.generate_and_save(base_sha, base_file, output)
    except OSError as e:
        _fail(state, e)
        return

    click.echo(markdown)
