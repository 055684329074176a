"""Snapshot routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query

from observatory.domain.report.model.value import AggregatedResult, SnapshotFilters
from observatory.domain.report.service.snapshot import SnapshotService
from observatory.domain.shared.model.record import Category

router = APIRouter(
    prefix="/snapshot",
    tags=["snapshot"],
    route_class=DishkaRoute,
)


@router.get("")
async def get_snapshot(
    service: FromDishka[SnapshotService],
    region: str | None = Query(None, description="Country code or name, e.g. 'US' or 'USA'"),
    category: Category | None = Query(None, description="Restrict events and metrics to one category"),
    limit: int | None = Query(None, ge=1, description="Maximum number of events returned"),
) -> AggregatedResult:
    """Run every source once and return the aggregated snapshot.

    Always 200 while the process is healthy; failing providers are reported
    in ``sources`` and ``degraded`` instead.
    """
    filters = SnapshotFilters(region=region, category=category, limit=limit)
    return await service.aggregate(filters)
