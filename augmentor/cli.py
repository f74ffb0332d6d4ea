"""Command line entrypoint for the Bazel Quarkus augmentor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from augmentor.bootstrap import build_container
from augmentor.logging_config import configure_logging
from augmentor.modules.bootstrap.domain import AugmentationConfig, PipelineSummary, parse_archive_list
from augmentor.modules.bootstrap.service import PipelineResult
from augmentor.modules.bootstrap.util.exceptions import AugmentorError, InputError
from augmentor.settings import AugmentorSettings, get_settings

app = typer.Typer(
    name="augmentor",
    help="Run Quarkus build-time augmentation over Bazel-provided archives.",
    add_completion=False,
)
console = Console()
log = logging.getLogger(__name__)


def _split_all(values: Optional[List[str]]) -> List[Path]:
    paths: List[Path] = []
    for value in values or []:
        paths.extend(parse_archive_list(value))
    return paths


def _print_summary(summary: PipelineSummary) -> None:
    table = Table(title="Augmentation Summary")
    table.add_column("Stage", style="cyan")
    table.add_column("Count", justify="right", style="green")
    for label, count in summary.as_rows():
        table.add_row(label, str(count))
    console.print(table)


def _print_result(result: PipelineResult, config: AugmentationConfig) -> None:
    _print_summary(result.summary)
    for ext in result.prepared.mapping.unmapped:
        console.print(f"[yellow]Unmapped extension:[/yellow] {escape(ext.coordinate.key)}")
    console.print(f"[green]Output written to[/green] {config.output_dir}")
    if result.runner_jar is not None:
        console.print(f"[green]Runner JAR:[/green] {result.runner_jar}")


@app.command()
def augment(
    output_dir: Path = typer.Option(
        ...,
        "--output-dir",
        help="Destination for the materialized application layout",
    ),
    application_jars: Optional[List[str]] = typer.Option(
        None,
        "--application-jars",
        help="Application archives, comma or path-separator delimited (repeatable)",
    ),
    runtime_jars: Optional[List[str]] = typer.Option(
        None,
        "--runtime-jars",
        help="Runtime dependency archives (repeatable)",
    ),
    deployment_jars: Optional[List[str]] = typer.Option(
        None,
        "--deployment-jars",
        help="Deployment companion archives (repeatable)",
    ),
    app_name: Optional[str] = typer.Option(
        None,
        "--app-name",
        help="Application name (default from settings: application)",
    ),
    main_class: Optional[str] = typer.Option(
        None,
        "--main-class",
        help="Main class recorded in the runnable archive",
    ),
    build_dir: Optional[Path] = typer.Option(
        None,
        "--build-dir",
        help="Keep the framework's working output in this directory",
    ),
    runner_jar: Optional[bool] = typer.Option(
        None,
        "--runner-jar/--no-runner-jar",
        help="Also write <app-name>-runner.jar next to the output",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Augment the application and copy the result to --output-dir."""
    settings: AugmentorSettings = get_settings()
    if runner_jar is not None:
        settings = settings.model_copy(update={"create_runner_jar": runner_jar})
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_format)

    try:
        config = (
            AugmentationConfig.builder()
            .add_application_jars(_split_all(application_jars))
            .add_runtime_jars(_split_all(runtime_jars))
            .add_deployment_jars(_split_all(deployment_jars))
            .set_output_dir(output_dir)
            .set_application_name(app_name or settings.app_name)
            .set_main_class(main_class or settings.main_class)
            .set_build_dir(build_dir)
            .build()
        )
    except InputError as exc:
        console.print(f"[red]Invalid arguments:[/red] {escape(str(exc))}")
        raise typer.Exit(exc.exit_code)

    log.debug(
        "Inputs: %d application, %d runtime, %d deployment archives",
        len(config.application_jars),
        len(config.runtime_jars),
        len(config.deployment_jars),
    )
    container = build_container(settings)
    try:
        result = container.pipeline.run(config)
    except AugmentorError as exc:
        if exc.summary is not None:
            _print_summary(exc.summary)
        console.print(f"[red]Augmentation failed:[/red] {escape(str(exc))}")
        raise typer.Exit(exc.exit_code)
    finally:
        container.close()

    _print_result(result, config)


def main() -> None:
    app()
