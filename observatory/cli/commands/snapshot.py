"""Snapshot command - one in-process aggregation run."""

import asyncio
import sys

import cyclopts

from observatory.application.di import create_container
from observatory.cli.console import get_console
from observatory.config import Config, configure_logging
from observatory.domain.report.model.value import AggregatedResult, SnapshotFilters
from observatory.domain.report.service.snapshot import SnapshotService
from observatory.domain.shared.error import ValidationError
from observatory.domain.shared.model.record import Category
from observatory.infrastructure.source.discovery import SourceConfigError
from observatory.util.di.scope import Scope

app = cyclopts.App(name="snapshot", help="Aggregate every source once and print the result")


async def _aggregate(config: Config, filters: SnapshotFilters) -> AggregatedResult:
    container = create_container(config)
    try:
        async with container(scope=Scope.REQUEST) as request_container:
            service = await request_container.get(SnapshotService)
            return await service.aggregate(filters)
    finally:
        await container.close()


@app.default
def snapshot(
    *,
    region: str | None = None,
    category: Category | None = None,
    limit: int | None = None,
    json: bool = False,
) -> None:
    """Fetch all providers concurrently and render the snapshot.

    Args:
        region: Only events for this country code or name (e.g. 'US', 'USA').
        category: Only events and metrics in this category.
        limit: Maximum number of events to print.
        json: Emit the raw JSON payload instead of tables.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        filters = SnapshotFilters(region=region, category=category, limit=limit)
    except ValueError as e:
        console.error(f"Invalid filters: {e}")
        sys.exit(2)

    try:
        if json:
            result = asyncio.run(_aggregate(config, filters))
        else:
            with console.status("Querying sources..."):
                result = asyncio.run(_aggregate(config, filters))
    except ValidationError as e:
        console.error(f"Invalid filters: {e.message}")
        sys.exit(2)
    except (SourceConfigError, ValueError) as e:
        console.error(str(e), hint="Check the 'sources' section of your config file")
        sys.exit(1)

    if json:
        console.print_json(result.model_dump_json())
        return

    console.snapshot(result)
