"""Command-line interface built with Click."""

import asyncio
import functools
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ..cdn.manager import CDNManager
from ..config import ConfigLoader, create_example_config, get_settings
from ..crawler.browser import SEOCrawler
from ..pages.catalog import YamlPageCatalog
from ..scheduler.frequency import compute_next_run
from ..scheduler.types import Frequency
from ..utils.logging import get_structured_logger, setup_logging
from .types import CLIContext, CLIError, CommandResult, OutputFormat

console = Console()
logger = get_structured_logger(__name__)


def async_command(f):
    """Run an async Click command on a fresh event loop."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(f(*args, **kwargs))
        except KeyboardInterrupt:
            console.print("Operation cancelled by user", style="red")
            sys.exit(1)
        except Exception as e:
            console.print(f"Error: {str(e)}", style="red")
            logger.error(f"CLI command failed: {str(e)}")
            sys.exit(1)

    return wrapper


def handle_result(result: CommandResult, ctx: CLIContext) -> None:
    """Print a command result and exit non-zero on failure."""
    if result.success:
        if result.message:
            console.print(result.message, style="green")
        if result.data and ctx.verbose:
            console.print_json(data=result.data)
    else:
        console.print(result.message, style="red")
        if result.data and ctx.debug:
            console.print_json(data=result.data)
        sys.exit(result.exit_code)


def _pages_path(ctx: CLIContext) -> Path:
    return Path(ctx.pages_file or get_settings().pages_file)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--pages-file", type=click.Path(), help="Path to the page catalog")
@click.pass_context
def cli(ctx, verbose: bool, debug: bool, pages_file: Optional[str]) -> None:
    """seowatch - SEO crawl scheduling and alerting."""
    ctx.obj = CLIContext(verbose=verbose, debug=debug, pages_file=pages_file)
    setup_logging("DEBUG" if debug else "WARNING")


@cli.command()
@click.option("--host", help="Bind address (defaults to API_HOST)")
@click.option("--port", type=int, help="Bind port (defaults to API_PORT)")
@click.pass_obj
def serve(ctx: CLIContext, host: Optional[str], port: Optional[int]) -> None:
    """Run the API server together with the scheduler and alert timers."""
    import uvicorn

    from ..api.app import create_app

    settings = get_settings()
    if ctx.pages_file:
        settings = settings.model_copy(update={"pages_file": ctx.pages_file})
    setup_logging(settings.log_level, settings.json_logs)

    uvicorn.run(
        create_app(settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )


@cli.command()
@click.argument("url")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([OutputFormat.TEXT.value, OutputFormat.JSON.value]),
    default=OutputFormat.TEXT.value,
)
@click.pass_obj
@async_command
async def crawl(ctx: CLIContext, url: str, output_format: str) -> None:
    """Crawl a single URL and print its SEO score."""
    crawler = SEOCrawler(get_settings().crawler)
    async with crawler:
        report = await crawler.crawl(url)

    if output_format == OutputFormat.JSON.value:
        console.print_json(
            json.dumps(
                {
                    "url": report.url,
                    "status": report.status.value,
                    "http_status": report.http_status,
                    "response_time_ms": report.response_time_ms,
                    "seo_score": report.seo_score,
                    "recommendations": report.recommendations,
                    "error_details": report.error_details,
                    "meta": report.meta,
                },
                default=str,
            )
        )
        return

    style = "green" if report.success else "red"
    console.print(f"{report.url}: {report.status.value}", style=style)
    console.print(f"SEO score: {report.seo_score}/100")
    console.print(f"Response time: {report.response_time_ms}ms")
    if report.error_details:
        console.print(f"Error: {report.error_details}", style="red")
    for recommendation in report.recommendations:
        console.print(f"  - {recommendation}")


@cli.group()
def pages():
    """Page catalog commands."""
    pass


@pages.command("list")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([OutputFormat.TABLE.value, OutputFormat.JSON.value]),
    default=OutputFormat.TABLE.value,
)
@click.pass_obj
@async_command
async def list_pages(ctx: CLIContext, output_format: str) -> None:
    """List the monitored pages and their URLs."""
    settings = get_settings()
    catalog = YamlPageCatalog(_pages_path(ctx))
    entries = await catalog.list_pages()

    if output_format == OutputFormat.JSON.value:
        console.print_json(
            data=[
                {**page.to_dict(), "url": page.full_url(settings.scheduler.base_url)}
                for page in entries
            ]
        )
        return

    if not entries:
        console.print("No pages configured", style="yellow")
        return

    table = Table(title="Monitored Pages")
    table.add_column("ID", style="cyan")
    table.add_column("Page")
    table.add_column("Locale")
    table.add_column("URL", style="blue")

    for page in entries:
        table.add_row(
            page.id,
            page.page_key,
            page.locale,
            page.full_url(settings.scheduler.base_url),
        )

    console.print(table)


@pages.command("validate")
@click.pass_obj
def validate_pages(ctx: CLIContext) -> None:
    """Check the page catalog for problems."""
    issues = ConfigLoader(_pages_path(ctx)).validate_config()

    if issues:
        for issue in issues:
            console.print(f"  - {issue}", style="red")
        handle_result(
            CommandResult(
                success=False,
                message=f"Found {len(issues)} issue(s) in the page catalog",
                data={"issues": issues},
                exit_code=1,
            ),
            ctx,
        )
        return

    handle_result(CommandResult(success=True, message="Page catalog is valid"), ctx)


@pages.command("init")
@click.argument("path", type=click.Path(), default="pages.yaml")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@click.pass_obj
def init_pages(ctx: CLIContext, path: str, force: bool) -> None:
    """Write an example page catalog."""
    target = Path(path)
    if target.exists() and not force:
        handle_result(
            CommandResult(
                success=False,
                message=f"{target} already exists (use --force to overwrite)",
                exit_code=1,
            ),
            ctx,
        )
        return

    create_example_config(target)
    handle_result(
        CommandResult(success=True, message=f"Example page catalog written to {target}"),
        ctx,
    )


@cli.command("next-run")
@click.argument(
    "frequency", type=click.Choice([f.value for f in Frequency], case_sensitive=False)
)
@click.option(
    "--from",
    "from_",
    type=click.DateTime(),
    help="Reference time (defaults to now)",
)
def next_run(frequency: str, from_: Optional[datetime]) -> None:
    """Show when a page with FREQUENCY would run next."""
    base = from_ or datetime.now()
    console.print(compute_next_run(frequency.lower(), base).isoformat(sep=" "))


@cli.command()
@click.argument("urls", nargs=-1)
@click.option("--page", "page_id", help="Invalidate every URL derived from a page")
@click.pass_obj
@async_command
async def invalidate(ctx: CLIContext, urls: tuple, page_id: Optional[str]) -> None:
    """Purge URLs from every configured CDN."""
    settings = get_settings()
    manager = CDNManager.from_settings(
        settings.cdn, base_url=settings.scheduler.base_url
    )
    targets = list(urls)

    if page_id:
        page = await YamlPageCatalog(_pages_path(ctx)).get_page(page_id)
        if page is None:
            raise CLIError(f"Page not found: {page_id}")
        targets.extend(manager.urls_for_page(page))

    try:
        summary = await manager.invalidate_urls(list(dict.fromkeys(targets)))
    finally:
        await manager.close()

    for result in summary.results:
        style = "green" if result.success else "red"
        console.print(f"{result.provider}: {result.message}", style=style)

    handle_result(
        CommandResult(
            success=summary.success,
            message=(
                f"Invalidated {len(summary.urls)} URL(s)"
                if summary.success
                else "CDN invalidation failed"
            ),
            data=summary.to_dict(),
            exit_code=1,
        ),
        ctx,
    )


def create_cli():
    """Return the root Click group."""
    return cli
