"""CLI entry point for the visual parity runner."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from playwright.async_api import Error as PlaywrightError
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from visual_parity.models.config import EnvironmentConfig, ParityConfig
from visual_parity.orchestrator import Orchestrator
from visual_parity.reporter.reporter import ReportWriteError
from visual_parity.url_utils import PageSetError

logger = logging.getLogger(__name__)
console = Console()

EXIT_FATAL = 2
DEFAULT_CONFIG = "parity-config.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def load_config(path: str) -> ParityConfig:
    try:
        return ParityConfig.load(path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {path}[/red]")
        console.print("Run 'visual-parity init' to create a default config.")
        sys.exit(EXIT_FATAL)
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid config {path}:[/red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Staging vs production visual regression runner"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--device", "-d", default=None, help="Only run this device profile")
def run(config: str, device: str | None) -> None:
    """Capture, compare, and report every configured page."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        results = orchestrator.run_full_pipeline(device)
    except (PageSetError, ReportWriteError, KeyError) as e:
        console.print(f"[red]Run aborted:[/red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)
    except PlaywrightError as e:
        logger.error("Browser failure: %s", e)
        console.print(f"[red]Run aborted, browser failure:[/red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)
    except Exception as e:
        logger.exception("Run failed")
        console.print(f"[red]Run aborted:[/red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)

    console.print("\n[bold green]Comparison Complete[/bold green]")
    for w in results["parity_warnings"]:
        console.print(f"  [yellow]Parity warning:[/yellow] {w}")

    for run_summary in results["runs"]:
        table = Table(title=f"Results Summary: {run_summary['device']}")
        table.add_column("Metric", style="bold")
        table.add_column("Value")
        table.add_row("Run ID", run_summary["run_id"])
        table.add_row("Duration", f"{run_summary['duration']}s")
        table.add_row("Total Pages", str(run_summary["results"]["total"]))
        table.add_row("Passed", f"[green]{run_summary['results']['passed']}[/green]")
        table.add_row("Failed", f"[red]{run_summary['results']['failed']}[/red]")
        table.add_row("Errors", f"[yellow]{run_summary['results']['errors']}[/yellow]")
        console.print(table)

        for fmt, path in run_summary["reports"].items():
            console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")

    sys.exit(results["exit_code"])


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def pages(config: str) -> None:
    """Show the resolved page set and any staging/prod parity warnings."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        targets, warnings = orchestrator.resolve_pages()
    except PageSetError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_FATAL)

    table = Table(title=f"{len(targets)} pages")
    table.add_column("Page", style="bold")
    table.add_column("Artifact name")
    table.add_column("Staging URL")
    table.add_column("Prod URL")
    for t in targets:
        table.add_row(t.page_path, f"{t.sanitized_path}.png", t.staging_url, t.prod_url)
    console.print(table)
    for w in warnings:
        console.print(f"[yellow]Parity warning:[/yellow] {w}")


@cli.command("check-images")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def check_images(config: str) -> None:
    """Check staging pages for broken images."""
    cfg = load_config(config)
    orchestrator = Orchestrator(cfg)
    try:
        reports = orchestrator.run_image_check()
    except PageSetError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(EXIT_FATAL)
    except Exception as e:
        logger.exception("Image check failed")
        console.print(f"[red]Image check aborted:[/red] {escape(str(e))}")
        sys.exit(EXIT_FATAL)

    table = Table(title="Image Check")
    table.add_column("Page", style="bold")
    table.add_column("Found")
    table.add_column("Checked")
    table.add_column("Skipped")
    table.add_column("Broken")
    for r in reports:
        broken = f"[red]{len(r.broken)}[/red]" if r.broken else "[green]0[/green]"
        if r.error:
            broken = f"[red]page error: {r.error}[/red]"
        table.add_row(r.page_url, str(r.images_found), str(r.images_checked),
                      str(r.images_skipped), broken)
    console.print(table)

    for r in reports:
        for b in r.broken:
            console.print(f"  [red]{r.page_url}[/red] image {b.index}: {b.src or '(no src)'}: {b.reason}")

    sys.exit(0 if all(r.passed for r in reports) else 1)


@cli.command()
@click.option("--staging", "-s", prompt="Staging base URL", help="Staging deployment base URL")
@click.option("--prod", "-p", prompt="Production base URL", help="Production deployment base URL")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path to create")
def init(staging: str, prod: str, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = ParityConfig(
        staging=EnvironmentConfig(base_url=staging, urls=["/"]),
        prod=EnvironmentConfig(base_url=prod, urls=["/"]),
    )
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nAdd page paths to staging.urls, then run:")
    console.print("  [blue]visual-parity run[/blue]")


if __name__ == "__main__":
    cli()
