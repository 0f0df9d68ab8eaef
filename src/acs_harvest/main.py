# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides commands for catalog building, backlink discovery, harvesting and reconciliation

import httpx
import asyncclick as click
from rich.console import Console
from rich.markup import escape

from acs_harvest.catalog import CatalogLookup, build_catalog, fetch_backlinks
from acs_harvest.config import Config, get_config
from acs_harvest.core.assembler import RecordAssembler
from acs_harvest.core.reconciler import Reconciler, select_candidates
from acs_harvest.core.scheduler import HarvestScheduler, HarvestTarget, targets_from_range
from acs_harvest.core.sorting import SortField, sort_records
from acs_harvest.errors import HarvestError, InvalidFieldRequested
from acs_harvest.extraction import PageFetcher
from acs_harvest.persistence import catalog_file, dataset_file, discovery_file
from acs_harvest.utils.logging import (
    LoggingMode,
    configure_logging,
    create_harvest_progress,
    get_logging_status,
    with_pipeline_context,
)
from acs_harvest.utils.rich_tables import create_logging_status_table, create_run_summary_table, print_rich_table

console = Console()


def _create_fetcher(config: Config) -> PageFetcher:
    return PageFetcher(user_agent=config.user_agent, referer=config.referer)


def _create_scheduler(
    config: Config, fetcher: PageFetcher, catalog: CatalogLookup, limit: int, retries: int
) -> HarvestScheduler:
    return HarvestScheduler(
        fetcher,
        assembler=RecordAssembler(catalog),
        limit=limit,
        retries=retries,
        request_delay=config.request_delay,
        retry_backoff=config.retry_backoff,
    )


async def _run_scheduled(run, description: str, total: int, json_output: bool):
    """Run a scheduler coroutine factory with a progress bar unless JSON output is requested."""
    if json_output:
        return await run(None)

    progress, tracker = create_harvest_progress(console, description, total)
    with progress:
        return await run(tracker)


def _fail(message: str) -> None:
    console.print(f"[red]❌ {escape(message)}[/red]")
    raise click.exceptions.Exit(1)


@click.command()
@click.pass_context
async def catalog(ctx):
    """
    📚 Build the SCP name catalog from the series index pages.
    """
    config = get_config()
    with with_pipeline_context("catalog") as logger:
        try:
            async with _create_fetcher(config) as fetcher:
                entries = await build_catalog(fetcher, base_url=config.base_url)
            catalog_file(config.catalog_path).save(entries)
        except HarvestError as e:
            logger.error("Catalog build failed", error=str(e))
            _fail(str(e))

        logger.info("Catalog built", entries=len(entries))
        if not ctx.obj["json_output"]:
            console.print(f"✅ Catalog: [bold green]{len(entries)}[/bold green] entries -> {config.catalog_path}")


@click.command()
@click.pass_context
async def backlinks(ctx):
    """
    🔗 Build the discovery feed from the backlinks of the ACS component pages.
    """
    config = get_config()
    with with_pipeline_context("backlinks") as logger:
        try:
            lookup = CatalogLookup.load(config.catalog_path)
            async with httpx.AsyncClient(headers={"User-Agent": config.user_agent}, timeout=30.0) as client:
                entries = await fetch_backlinks(client, lookup, base_url=config.base_url)
            discovery_file(config.backlinks_path).save(entries)
        except HarvestError as e:
            logger.error("Backlinks fetch failed", error=str(e))
            _fail(str(e))

        logger.info("Discovery feed built", entries=len(entries))
        if not ctx.obj["json_output"]:
            fragments = sum(1 for entry in entries if entry.is_fragment)
            console.print(
                f"✅ Backlinks: [bold green]{len(entries)}[/bold green] entries "
                f"({fragments} fragments) -> {config.backlinks_path}"
            )


@click.command()
@click.option("--start", type=int, default=None, help="First catalog number")
@click.option("--end", type=int, default=None, help="Last catalog number (inclusive)")
@click.option("--limit", "-l", type=click.IntRange(min=1), default=None, help="Maximum concurrent requests")
@click.option("--retries", "-r", type=click.IntRange(min=0), default=None, help="Retries after a transient failure")
@click.pass_context
async def harvest(ctx, start: int | None, end: int | None, limit: int | None, retries: int | None):
    """
    🕷️ Harvest ACS data for a range of catalog numbers and rewrite the dataset.
    """
    config = get_config()
    start = config.start if start is None else start
    end = config.end if end is None else end
    limit = config.limit if limit is None else limit
    retries = config.retries if retries is None else retries
    json_output = ctx.obj["json_output"]

    with with_pipeline_context("harvest", start=start, end=end, limit=limit, retries=retries) as logger:
        try:
            lookup = CatalogLookup.load(config.catalog_path)
        except HarvestError as e:
            logger.error("Cannot load catalog", error=str(e))
            _fail(f"{e} (run the 'catalog' command first)")

        targets: list[HarvestTarget] = targets_from_range(start, end, lookup, config.url_template)

        async with _create_fetcher(config) as fetcher:
            scheduler = _create_scheduler(config, fetcher, lookup, limit, retries)
            result = await _run_scheduled(
                lambda progress: scheduler.run(targets, progress=progress),
                "Fetching ACS data",
                len(targets),
                json_output,
            )

        records = sort_records(result.records, config.sort_field)
        try:
            dataset_file(config.dataset_path).save(records)
        except HarvestError as e:
            logger.error("Cannot write dataset", error=str(e))
            _fail(str(e))

        logger.info("Harvest finished", records=len(records), **result.stats.as_dict())
        if not json_output:
            print_rich_table(console, create_run_summary_table("Harvest", result.stats.as_dict(), len(records)))


@click.command()
@click.option("--limit", "-l", type=click.IntRange(min=1), default=None, help="Maximum concurrent requests")
@click.option("--retries", "-r", type=click.IntRange(min=0), default=None, help="Retries after a transient failure")
@click.pass_context
async def reconcile(ctx, limit: int | None, retries: int | None):
    """
    🔀 Add discovery feed entries that are missing from the dataset.
    """
    config = get_config()
    limit = config.limit if limit is None else limit
    retries = config.retries if retries is None else retries
    json_output = ctx.obj["json_output"]

    with with_pipeline_context("reconcile", limit=limit, retries=retries) as logger:
        try:
            existing = dataset_file(config.dataset_path).load()
            feed = discovery_file(config.backlinks_path).load()
            lookup = CatalogLookup.load(config.catalog_path) if config.catalog_path.exists() else CatalogLookup()
        except HarvestError as e:
            logger.error("Cannot load reconciliation inputs", error=str(e))
            _fail(str(e))

        async with _create_fetcher(config) as fetcher:
            reconciler = Reconciler(_create_scheduler(config, fetcher, lookup, limit, retries))
            merged, result = await _run_scheduled(
                lambda progress: reconciler.reconcile(existing, feed, progress=progress),
                "Cross comparing backlinks to the dataset",
                len(select_candidates(existing, feed)),
                json_output,
            )

        records = sort_records(merged, config.sort_field)
        try:
            dataset_file(config.dataset_path).save(records)
        except HarvestError as e:
            logger.error("Cannot write dataset", error=str(e))
            _fail(str(e))

        logger.info("Reconciliation finished", records=len(records), added=len(result.records))
        if not json_output:
            print_rich_table(console, create_run_summary_table("Reconciliation", result.stats.as_dict(), len(records)))


@click.command(name="sort")
@click.option("--file", "file_path", type=click.Path(dir_okay=False), default=None, help="Dataset file to sort")
@click.option("--field", default=None, help="Field to sort by (default: actual_number)")
@click.pass_context
async def sort_dataset(ctx, file_path: str | None, field: str | None):
    """
    🔢 Sort a dataset file in place by a numeric-aware key.
    """
    config = get_config()
    try:
        sort_field = SortField.parse(field) if field else config.sort_field
    except InvalidFieldRequested as e:
        raise click.BadParameter(str(e), param_hint="--field") from e

    store = dataset_file(file_path or config.dataset_path)
    try:
        store.save(sort_records(store.load(), sort_field))
    except HarvestError as e:
        _fail(str(e))

    if not ctx.obj["json_output"]:
        console.print(f"✅ Sorted {store.path} by [bold]{sort_field.value}[/bold]")


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    print_rich_table(console, create_logging_status_table(status))


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    config = get_config()
    mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE

    # Use config defaults when CLI parameters are not provided
    final_log_level = log_level or config.log_level
    final_log_file = log_file or (str(config.log_file) if config.log_file else None)

    configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    🗂️ ACS Harvest - Anomaly Classification System dataset builder

    Scrapes SCP wiki pages for their ACS classification and keeps a sorted,
    deduplicated JSON dataset up to date.
    """
    # Store global options in context for commands to access
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    # Initialize logging once here instead of in each command
    _initialize_logging(json, log_level, log_file)

    # Show help if no command provided
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Add commands to the main group
app.add_command(catalog)
app.add_command(backlinks)
app.add_command(harvest)
app.add_command(reconcile)
app.add_command(sort_dataset)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
