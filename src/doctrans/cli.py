"""
CLI for doctrans.

Provides commands to translate a document into reviewable segments, inspect
configured backends and stored jobs, and generate a default configuration.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from doctrans.config import Settings, create_default_config, load_config, setup_logging
from doctrans.database import DuckDBJobStore
from doctrans.errors import DocTransError
from doctrans.jobs import InMemoryJobStore, JobRunner, JobStore
from doctrans.languages import LANGUAGE_NAMES
from doctrans.models import (
    DocumentDomain,
    JobStatus,
    OCRQualityLevel,
    ProviderKind,
    TranslationRequest,
)
from doctrans.translation.pipeline import DocumentTranslationPipeline
from doctrans.translation.registry import ClientRegistry

app = typer.Typer(
    name="doctrans",
    help="Document translation pipeline: extraction, OCR and multi-backend translation.",
    add_completion=False,
)

console = Console()

MIME_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
    ".bmp": "image/bmp",
}


def get_settings(config_path: Path | None = None) -> Settings:
    """Load settings from config file or defaults."""
    if config_path and config_path.exists():
        return load_config(config_path)
    return load_config()


def _provider_status(settings: Settings) -> dict[ProviderKind, str]:
    providers = settings.providers
    google = providers.google
    if google.project_id and google.access_token:
        google_status = "v3 (glossaries)"
    elif google.api_key:
        google_status = "v2 (API key)"
    else:
        google_status = ""
    return {
        ProviderKind.GOOGLE: google_status,
        ProviderKind.OPENAI: providers.openai.model if providers.openai.api_key else "",
        ProviderKind.ANTHROPIC: providers.anthropic.model if providers.anthropic.api_key else "",
        ProviderKind.OPENROUTER: (
            providers.openrouter.model if providers.openrouter.api_key else ""
        ),
    }


@app.command()
def translate(
    file: Path = typer.Argument(..., help="Document to translate (PDF, DOCX, XLSX or image)"),
    target: str = typer.Option("en", "--target", "-t", help="Target language code"),
    source: str = typer.Option("auto", "--source", "-s", help="Source language code or 'auto'"),
    provider: str | None = typer.Option(
        None, "--provider", "-p", help="google, openai, anthropic or openrouter"
    ),
    domain: str = typer.Option(
        "general", "--domain", "-d", help="general, certificate, legal, medical or technical"
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="OpenRouter model id"),
    ocr_quality: str = typer.Option(
        "high", "--ocr-quality", help="OCR quality: low, high or auto"
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write segments JSON here"),
    db: Path | None = typer.Option(None, "--db", help="DuckDB job store path"),
    order_id: str = typer.Option("local", "--order-id", help="Order id to file the job under"),
) -> None:
    """Translate a document and print or save its segments."""
    settings = get_settings(config)
    setup_logging(settings.logging)

    if not file.exists():
        console.print(f"[red]Error: {file} not found[/red]")
        raise typer.Exit(1)

    mime_type = MIME_TYPES.get(file.suffix.lower())
    if mime_type is None:
        console.print(f"[red]Error: unsupported file type {file.suffix}[/red]")
        raise typer.Exit(1)

    request = TranslationRequest(
        order_id=order_id,
        file_name=file.name,
        source_language=source,
        target_language=target,
        data=file.read_bytes(),
        mime_type=mime_type,
        provider=ProviderKind.parse(provider or settings.translation.default_provider),
        domain=DocumentDomain.parse(domain),
        model=model,
        ocr_quality=OCRQualityLevel.parse(ocr_quality),
    )

    store: JobStore = DuckDBJobStore(db) if db else InMemoryJobStore()
    runner = JobRunner(DocumentTranslationPipeline(ClientRegistry.from_settings(settings)), store)

    try:
        with console.status(f"Translating {file.name} via {request.provider.value}..."):
            job = asyncio.run(runner.run(request))
    except DocTransError as e:
        console.print(
            Panel(
                f"{e.user_message}\n\n[dim]{e.message}[/dim]",
                title=f"[red]Translation failed ({e.category})[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(1) from None
    finally:
        if isinstance(store, DuckDBJobStore):
            store.close()

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(
            json.dumps([s.to_dict() for s in job.segments], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        console.print(f"[green]Wrote {len(job.segments)} segments to {output}[/green]")
    else:
        table = Table(title=f"{file.name} → {target}")
        table.add_column("#", justify="right")
        table.add_column("Page", justify="right")
        table.add_column("Original", style="cyan")
        table.add_column("Translated", style="green")
        for segment in job.segments:
            table.add_row(
                str(segment.order),
                str(segment.page_number or ""),
                segment.original_text,
                segment.translated_text,
            )
        console.print(table)

    if job.detected_source_language:
        console.print(f"Detected source language: [cyan]{job.detected_source_language}[/cyan]")
    console.print(f"\n[bold green]Status: {job.status.value} ({job.progress}%)[/bold green]")


@app.command()
def providers(
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
) -> None:
    """Show which translation backends are configured."""
    settings = get_settings(config)

    table = Table(title="Translation providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Status")
    table.add_column("Default", justify="center")

    for kind, detail in _provider_status(settings).items():
        status = f"[green]{detail}[/green]" if detail else "[red]not configured[/red]"
        default = "✓" if kind == settings.translation.default_provider else ""
        table.add_row(kind.value, status, default)

    console.print(table)
    console.print(
        f"\nTimeout: {settings.translation.request_timeout_ms} ms, "
        f"vision refine: {'off' if settings.vision.disable_refine else 'on'}, "
        f"languages: {len(LANGUAGE_NAMES)} + auto"
    )


@app.command()
def jobs(
    db: Path = typer.Option(..., "--db", help="DuckDB job store path"),
    order_id: str | None = typer.Option(None, "--order-id", help="Filter by order id"),
    status: str | None = typer.Option(None, "--status", help="Filter by job status"),
) -> None:
    """List stored translation jobs."""
    store = DuckDBJobStore(db)
    try:
        job_status = JobStatus(status) if status else None
    except ValueError:
        console.print(f"[red]Error: unknown status {status}[/red]")
        raise typer.Exit(1) from None

    try:
        rows = store.list_jobs(order_id=order_id, status=job_status)
    finally:
        store.close()

    table = Table(title="Translation jobs")
    table.add_column("Order", style="cyan")
    table.add_column("File")
    table.add_column("Provider", style="magenta")
    table.add_column("Status", style="yellow")
    table.add_column("Progress", justify="right")
    table.add_column("Segments", justify="right")
    table.add_column("Error", style="red")
    for job in rows:
        table.add_row(
            job.order_id,
            job.file_name,
            job.provider.value,
            job.status.value,
            f"{job.progress}%",
            str(len(job.segments)),
            job.error or "",
        )
    console.print(table)


@app.command("init-config")
def init_config(
    output_path: Path = typer.Option(
        Path("doctrans.yaml"),
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """Generate a default configuration file."""
    if output_path.exists():
        overwrite = typer.confirm(f"{output_path} already exists. Overwrite?")
        if not overwrite:
            raise typer.Abort()

    create_default_config(output_path)
    console.print(f"[green]Created config file: {output_path}[/green]")
    console.print("\nSet your API keys (or export them as environment variables), then run:")
    console.print(f"  doctrans translate ./document.pdf --target en --config {output_path}")


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
