"""Console script for compattable."""

from __future__ import annotations

import logging
import os

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from . import __version__ as _version
from .constants import DEBUG_ENV_VAR, DEFAULT_TIMEOUT_SECONDS, DEFAULT_WORKERS
from .exceptions import CompatError, NoMatchesError
from .http import fetch_feature_payloads, fetch_search_feature_ids, use_shared_client
from .normalize import normalize_feature
from .parse_feature import parse_feature_payload
from .render import render_feature, render_search_header

LOGGER = logging.getLogger(__name__)


def debug_enabled() -> bool:
    """Check debug mode env flag."""
    return os.environ.get(DEBUG_ENV_VAR, "").strip() == "1"


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug or debug_enabled() else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument(
    "query",
    metavar="<search term>",
    nargs=-1,
    required=True,
    type=click.STRING,
)
@click.option(
    "-b",
    "--browser",
    "browsers",
    multiple=True,
    help="Only show these browsers (repeatable), e.g. -b chrome -b firefox.",
)
@click.option(
    "-j",
    "--workers",
    type=click.IntRange(min=1),
    default=DEFAULT_WORKERS,
    show_default=True,
    help="Number of features fetched in parallel.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT_SECONDS,
    show_default=True,
    help="HTTP timeout in seconds.",
)
@click.option("--debug", is_flag=True, help=f"Enable debug logging (or set {DEBUG_ENV_VAR}=1).")
@click.version_option(_version, "-v", "--version")
def main(
    query: tuple[str, ...],
    browsers: tuple[str, ...],
    workers: int,
    timeout: float,
    debug: bool,
) -> None:
    """
    Show browser compatibility tables for caniuse.com features.

    \b
    Example usages:
      compattable flexbox
      compattable css grid -b chrome -b safari
    """
    configure_logging(debug)
    search_term = " ".join(query).strip()
    if not search_term:
        raise click.UsageError("Search term must not be empty.")

    console = Console()
    try:
        with use_shared_client(timeout=timeout):
            feature_ids = fetch_search_feature_ids(search_term)
            if not feature_ids:
                raise NoMatchesError(search_term)
            console.print(render_search_header(search_term, feature_ids))
            results = fetch_feature_payloads(feature_ids, workers=workers)
    except CompatError as exc:
        raise click.ClickException(str(exc)) from exc

    console.print()
    console.print(Text("📊 Feature data:", style="bold green"))
    failures = 0
    for index, (feature_id, payload) in enumerate(results, start=1):
        try:
            if isinstance(payload, CompatError):
                raise payload
            record = parse_feature_payload(payload, feature_id)
        except CompatError as exc:
            failures += 1
            LOGGER.debug("Skipping %s: %s", feature_id, exc)
            console.print(Text(f"Error: {exc}", style="bold red"))
            continue
        table = normalize_feature(record, browsers or None)
        LOGGER.debug("Normalized %s into %d rows", feature_id, len(table.rows))
        console.print(render_feature(table, index))

    if failures:
        raise click.ClickException(f"{failures} of {len(results)} feature(s) could not be loaded.")
