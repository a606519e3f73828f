"""apify-rest CLI - list collections, stream dataset items, wait for runs.

Commands:
- list: lazily page through a collection (actors, runs, datasets, ...)
- dataset-items: stream a dataset's items to stdout in any export format
- wait-run: poll a run until it reaches a terminal status

The token is read from --token, then APIFY_TOKEN (a .env file is honoured).
"""

from __future__ import annotations

import json
import logging
from itertools import islice
from typing import Any

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from apify_rest import __version__
from apify_rest.client import ApifyClient
from apify_rest.errors import ApifyError

load_dotenv()

console = Console()

COLLECTIONS: dict[str, str] = {
    "actors": "actors",
    "builds": "builds",
    "datasets": "datasets",
    "key-value-stores": "key_value_stores",
    "request-queues": "request_queues",
    "runs": "runs",
    "schedules": "schedules",
    "store": "store",
    "tasks": "tasks",
    "webhooks": "webhooks",
    "webhook-dispatches": "webhook_dispatches",
}

ITEM_FORMATS = ["json", "jsonl", "csv", "xlsx", "xml", "html", "rss"]


def _fail(error: ApifyError | None) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise click.Abort()


def _status_display(status: str | None) -> str:
    if status == "SUCCEEDED":
        return f"[green]{status}[/green]"
    if status in ("FAILED", "ABORTED", "TIMED-OUT"):
        return f"[red]{status}[/red]"
    if status in ("RUNNING", "READY"):
        return f"[yellow]{status}[/yellow]"
    return status or "-"


def _print_items_table(collection: str, items: list[Any]) -> None:
    table = Table(title=collection, box=None, show_edge=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="magenta")
    table.add_column("Status")
    table.add_column("Created", style="blue")

    for item in items:
        if not isinstance(item, dict):
            table.add_row(str(item), "-", "-", "-")
            continue
        name = item.get("name") or item.get("title") or "-"
        created = item.get("createdAt") or item.get("startedAt")
        table.add_row(
            str(item.get("id", "-")),
            escape(str(name)),
            _status_display(item.get("status")),
            str(created)[:19] if created else "-",
        )

    console.print(table)


@click.group()
@click.version_option(__version__, prog_name="apify-rest")
@click.option("--token", envvar="APIFY_TOKEN", help="Apify API token (default: $APIFY_TOKEN)")
@click.option("--base-url", default=None, help="API base URL (default: https://api.apify.com)")
@click.option("--max-retries", type=int, default=None, help="Retries for idempotent requests")
@click.option("-v", "--verbose", is_flag=True, help="Log HTTP activity to stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    token: str | None,
    base_url: str | None,
    max_retries: int | None,
    verbose: bool,
):
    """Command-line access to the Apify REST API."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )
    client = ApifyClient(token=token, base_url=base_url, max_retries=max_retries)
    ctx.obj = client
    ctx.call_on_close(client.close)


@cli.command(name="list")
@click.argument("collection", type=click.Choice(sorted(COLLECTIONS)))
@click.option("--offset", type=int, default=0, show_default=True, help="Items to skip")
@click.option("--limit", type=int, default=None, help="Page size (server default if omitted)")
@click.option("--desc", is_flag=True, help="Newest first")
@click.option("--max-items", type=int, default=100, show_default=True, help="Stop after N items")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_command(
    client: ApifyClient,
    collection: str,
    offset: int,
    limit: int | None,
    desc: bool,
    max_items: int,
    output_json: bool,
):
    """
    List a collection, fetching further pages only as needed.

    Examples:
        apify-rest list actors
        apify-rest list runs --desc --max-items 20
        apify-rest list datasets --json
    """
    resource = getattr(client, COLLECTIONS[collection])()
    pages = resource.iterate(offset=offset, limit=limit, desc=desc or None)
    items = list(islice(pages, max_items))
    if pages.failed:
        _fail(pages.error)

    if output_json:
        print(json.dumps(items, indent=2, default=str))
        return

    if not items:
        console.print(f"[dim]No {collection} found[/dim]")
        return
    _print_items_table(collection, items)
    if pages.total is not None and pages.total > len(items) + offset:
        console.print(f"[dim]Showing {len(items)} of {pages.total}[/dim]")


@cli.command(name="dataset-items")
@click.argument("dataset_id")
@click.option(
    "--format",
    "item_format",
    type=click.Choice(ITEM_FORMATS),
    default="json",
    show_default=True,
    help="Export format",
)
@click.option("--fields", default=None, help="Comma-separated fields to keep")
@click.option("--clean", is_flag=True, help="Skip empty and hidden fields")
@click.pass_obj
def dataset_items(
    client: ApifyClient,
    dataset_id: str,
    item_format: str,
    fields: str | None,
    clean: bool,
):
    """
    Stream a dataset's items to stdout without buffering them in memory.

    Examples:
        apify-rest dataset-items abc123 --format csv > items.csv
    """
    opened = client.dataset(dataset_id).stream_items(
        item_format,
        fields=fields.split(",") if fields else None,
        clean=clean or None,
    )
    if not opened.ok:
        _fail(opened.error)

    out = click.get_binary_stream("stdout")
    with opened.value as stream:
        for chunk in stream:
            out.write(chunk)
    out.flush()
    if stream.failed:
        _fail(stream.error)


@cli.command(name="wait-run")
@click.argument("run_id")
@click.option("--timeout", type=float, default=300.0, show_default=True, help="Seconds to wait")
@click.option("--poll-interval", type=float, default=2.0, show_default=True)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def wait_run(
    client: ApifyClient,
    run_id: str,
    timeout: float,
    poll_interval: float,
    output_json: bool,
):
    """
    Wait for a run to finish and print its final state.

    Exits non-zero if the run cannot be fetched or is still running at the
    deadline.
    """
    result = client.run(run_id).wait_for_finish(
        timeout_secs=timeout, poll_interval_secs=poll_interval
    )
    if not result.ok:
        _fail(result.error)

    run = result.value or {}
    if output_json:
        print(json.dumps(run, indent=2, default=str))
        return

    console.print(f"Run [cyan]{run.get('id', run_id)}[/cyan]: {_status_display(run.get('status'))}")
    if run.get("defaultDatasetId"):
        console.print(f"[dim]Dataset: {run['defaultDatasetId']}[/dim]")


def main():
    cli()


if __name__ == "__main__":
    main()
