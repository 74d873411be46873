"""
Rich progress displays for CLI operations.

All output goes to stderr to preserve stdout for the JSON result.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from genmedia.core.models import GenerationResult
from genmedia.core.providers import ProviderDescriptor

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)

_STATUS_STYLES = {
    "available": "green",
    "requires_credits": "yellow",
    "error": "red",
}


@contextmanager
def generation_progress(kind: str, provider: str) -> Iterator[None]:
    """
    Display a spinner while a vendor job runs.

    Args:
        kind: What is being generated ("image", "video", "upscale")
        provider: Display name of the provider

    Yields:
        None while generation is in progress
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,  # Disappears when done
    )
    with progress:
        task = progress.add_task(f"Generating {kind} [dim]({provider})[/dim]", total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(kind: str, result: GenerationResult) -> None:
    """Print a panel summarizing a finished generation."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    table.add_row("Provider", result.provider)
    table.add_row("Model", result.model_used)
    inference = result.timings.get("inference")
    if inference is not None:
        table.add_row("Time", f"{inference:.1f}s")
    table.add_row("Seed", str(result.seed))
    for asset in result.assets:
        url = asset.url if not asset.url.startswith("data:") else f"<{asset.content_type} data>"
        table.add_row("Asset", f"{url} [dim]{asset.width}x{asset.height}[/dim]")
    if result.prompt:
        table.add_row("Prompt", f"[dim]{result.prompt}[/dim]")

    panel = Panel(
        table,
        title=f"[bold green]✓ {kind.capitalize()} Generated[/bold green]",
        border_style="green",
        padding=(1, 2),
    )
    console.print()
    console.print(panel)


def print_providers(descriptors: list[ProviderDescriptor], current: str) -> None:
    """Print a table of providers with the current selection marked."""
    table = Table(title="Providers")
    table.add_column("", width=1)
    table.add_column("Id", style="cyan")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Image models")
    table.add_column("Video models")
    for descriptor in descriptors:
        style = _STATUS_STYLES.get(descriptor.availability_status, "white")
        table.add_row(
            "*" if descriptor.id == current else "",
            descriptor.id,
            descriptor.display_name,
            f"[{style}]{descriptor.availability_status}[/{style}]",
            ", ".join(descriptor.supported_image_models) or "-",
            ", ".join(descriptor.supported_video_models) or "-",
        )
    console.print(table)


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    console.print(f"[cyan]ℹ[/cyan] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {message}")
