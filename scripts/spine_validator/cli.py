"""
Command-line interface for the skeleton asset validator.
Provides commands for validating and inspecting skeleton exports.
"""

import os
from pathlib import Path
from typing import Optional, List
import typer
from rich.console import Console
from rich.table import Table

from .config import ValidatorConfig
from .sources.base import AssetSource, SourceError
from .sources.local import LocalFileSource, DirectorySource
from .processing.normalizer import InvalidDocumentError, load_document, normalize
from .processing.animations import AnimationCollector
from .processing.attachments import AttachmentExtractor
from .processing.report import ValidationReport
from .pipeline import ValidationPipeline, PipelineError

# Initialize typer app and rich console
app = typer.Typer(
    name="spine-validator",
    help="Skeleton asset validator - check that every attachment of a skeleton export resolves to an atlas region",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]spine-validator validate hero.json[/cyan]                          Use atlases and images next to hero.json
  [cyan]spine-validator validate hero.json -a hero.atlas -i hero.png[/cyan]  Use explicit files
  [cyan]spine-validator dir exports/hero --strict[/cyan]                   Fail on missing attachments
  [cyan]spine-validator inspect hero.json[/cyan]                           Show document structure

[bold]Environment Variables:[/bold]
  Use [cyan]spine-validator config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()


@app.command()
def validate(
    document: Path = typer.Argument(..., help="Skeleton JSON file"),
    atlas: Optional[List[Path]] = typer.Option(None, "--atlas", "-a", help="Atlas descriptor file (repeatable)"),
    image: Optional[List[Path]] = typer.Option(None, "--image", "-i", help="Atlas page image file (repeatable)"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON report to this file"),
    strict: bool = typer.Option(False, "--strict", help="Exit with an error on missing attachments or document errors"),
    contexts: bool = typer.Option(False, "--contexts", help="Show where each required attachment is referenced")
):
    """Validate a skeleton JSON against its atlases."""
    console.print(f"[bold blue]Validating {document.name}...[/bold blue]")

    config = _load_config(config_file)

    try:
        if atlas:
            source: AssetSource = LocalFileSource(document, atlas, image or [])
        else:
            source = LocalFileSource.beside_document(document, config)
    except SourceError as e:
        console.print(f"[red]Source error:[/red] {e}")
        raise typer.Exit(1)

    report = _run_validation(config, source)
    _finish(report, config, output, strict, contexts)


@app.command(name="dir")
def validate_directory(
    directory: Path = typer.Argument(..., help="Directory holding one skeleton export"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the JSON report to this file"),
    strict: bool = typer.Option(False, "--strict", help="Exit with an error on missing attachments or document errors"),
    contexts: bool = typer.Option(False, "--contexts", help="Show where each required attachment is referenced")
):
    """Validate the skeleton export found in a directory."""
    console.print(f"[bold blue]Validating export in {directory}...[/bold blue]")

    config = _load_config(config_file)

    try:
        source = DirectorySource(directory, config)
    except SourceError as e:
        console.print(f"[red]Source error:[/red] {e}")
        raise typer.Exit(1)

    report = _run_validation(config, source)
    _finish(report, config, output, strict, contexts)


@app.command()
def inspect(
    document: Path = typer.Argument(..., help="Skeleton JSON file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Show the structure of a skeleton JSON without checking atlases."""
    config = _load_config(config_file)

    try:
        data = load_document(LocalFileSource(document).read_document())
    except (SourceError, InvalidDocumentError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    view = normalize(data)
    animations = AnimationCollector(config.max_walk_depth).collect(view)
    extraction = AttachmentExtractor(config).extract(view)

    console.print(f"[green]✓[/green] Detected format: [cyan]{view.variant.value}[/cyan]")
    console.print(f"  • Animations ({len(animations)}): {', '.join(animations) or '-'}")
    console.print(f"  • Declared attachments: {len(extraction.defined_attachments)}")
    console.print(f"  • Atlas requirements: {len(extraction.atlas_requirements)}")

    if extraction.skin_structure:
        table = Table(title="Skins")
        table.add_column("Skin", style="cyan")
        table.add_column("Slots", style="green")
        table.add_column("Attachments", style="green")
        for skin, slots in extraction.skin_structure.items():
            table.add_row(skin, str(len(slots)), str(sum(len(keys) for keys in slots.values())))
        console.print(table)

    for error in extraction.errors:
        console.print(f"[yellow]Warning:[/yellow] {error.message}")


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage validator configuration."""
    if env_vars:
        _display_env_vars()
        return

    if not (show or validate_config):
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")
        return

    loaded = _load_config(config_file)

    if show:
        _display_config(loaded)

    if validate_config:
        errors = loaded.validate()
        if errors:
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
            raise typer.Exit(1)
        console.print("[green]✓ Configuration is valid[/green]")


def _run_validation(config: ValidatorConfig, source: AssetSource) -> ValidationReport:
    """Run the pipeline, turning expected failures into a clean exit."""
    pipeline = ValidationPipeline(config)
    try:
        return pipeline.run(source)
    except InvalidDocumentError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except SourceError as e:
        console.print(f"[red]Source error:[/red] {e}")
        raise typer.Exit(1)
    except PipelineError as e:
        console.print(f"[red]Pipeline error:[/red] {e}")
        raise typer.Exit(1)


def _finish(report: ValidationReport, config: ValidatorConfig, output: Optional[Path],
            strict: bool, contexts: bool) -> None:
    """Display the report, write it if asked, and set the exit code."""
    _display_report(report, contexts or config.show_contexts)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(report.to_json(), encoding='utf-8')
        console.print(f"[dim]Report written to {output}[/dim]")

    if (strict or config.strict) and not report.is_valid:
        raise typer.Exit(1)


def _display_report(report: ValidationReport, show_contexts: bool = False) -> None:
    """Display a validation report."""
    stats = report.stats

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Format", report.document_type.value)
    table.add_row("Animations", str(len(report.animations)))
    table.add_row("Skins", str(stats.total_skins))
    table.add_row("Declared attachments", str(stats.total_attachments))
    table.add_row("Atlas requirements", str(len(report.atlas_requirements)))
    table.add_row("Missing", str(len(report.missing_attachments)))
    table.add_row("Errors", str(stats.total_errors))
    table.add_row("Warnings", str(stats.total_warnings))
    console.print(table)

    if report.missing_attachments:
        console.print(f"\n[yellow]⚠ {len(report.missing_attachments)} missing attachments[/yellow]")
        for name in report.missing_attachments:
            if show_contexts:
                console.print(f"  • {name} [dim]({', '.join(report.requirements_map.get(name, ()))})[/dim]")
            else:
                console.print(f"  • {name}")
    else:
        console.print("\n[green]✓ All attachments found[/green]")

    broken_skins = {skin: names for skin, names in report.missing_by_skin.items() if names}
    if broken_skins:
        skin_table = Table(title="Skins with missing attachments")
        skin_table.add_column("Skin", style="cyan")
        skin_table.add_column("Missing", style="red")
        for skin, names in broken_skins.items():
            skin_table.add_row(skin, ", ".join(names))
        console.print(skin_table)

    for error in report.errors:
        console.print(f"[red]✗ {error.kind}:[/red] {error.message}")

    for warning in report.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")


def _load_config(config_file: Optional[Path]) -> ValidatorConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        try:
            config = ValidatorConfig.from_file(config_file)
        except ValueError as e:
            console.print(f"[red]Invalid configuration:[/red] {e}")
            raise typer.Exit(1)
        console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        # Try to find default config files
        default_configs = [
            Path("spine_validator.toml"),
            Path("spine_validator.json"),
        ]

        for config_path in default_configs:
            if config_path.exists():
                console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = ValidatorConfig.from_file(config_path)
                break

        if config is None:
            config = ValidatorConfig()

    # Apply environment variable overrides
    config = ValidatorConfig._apply_env_overrides(config)

    env_vars_used = [key for key in os.environ if key.startswith('SPINE_VALIDATOR_')]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _display_config(config: ValidatorConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Validator Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Non-texture Types", ", ".join(config.non_texture_types))
    table.add_row("Empty Marker Prefix", config.empty_marker_prefix or "-")
    table.add_row("Max Walk Depth", str(config.max_walk_depth))
    table.add_row("Atlas Extensions", ", ".join(config.atlas_extensions))
    table.add_row("Image Extensions", ", ".join(config.image_extensions))
    table.add_row("Check Page Images", str(config.check_page_images))
    table.add_row("Strict", str(config.strict))
    table.add_row("Show Contexts", str(config.show_contexts))
    table.add_row("Log Level", config.log_level)

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables for configuration."""
    table = Table(title="Validator Environment Variables")
    table.add_column("Environment Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")

    env_vars = [
        ("SPINE_VALIDATOR_NON_TEXTURE_TYPES", "Comma-separated attachment types never checked against atlases", "clipping,boundingbox"),
        ("SPINE_VALIDATOR_EMPTY_MARKER_PREFIX", "Prefix of placeholder attachment names", "__empty"),
        ("SPINE_VALIDATOR_MAX_WALK_DEPTH", "Deepest nesting level scanned", "512"),
        ("SPINE_VALIDATOR_CHECK_PAGE_IMAGES", "Check atlas page images (true/false)", "true"),
        ("SPINE_VALIDATOR_STRICT", "Fail on missing attachments (true/false)", "false"),
        ("SPINE_VALIDATOR_LOG_LEVEL", "Logging level", "INFO"),
    ]

    for var_name, description, example in env_vars:
        table.add_row(var_name, description, example)

    console.print(table)
    console.print("\n[dim]Set these environment variables to override configuration file settings.[/dim]")
    console.print("[dim]Example: export SPINE_VALIDATOR_STRICT=true[/dim]")


if __name__ == "__main__":
    app()
