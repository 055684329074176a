"""Source registry routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from observatory.domain.aggregation.model.registry import AdapterRegistry

router = APIRouter(
    prefix="/sources",
    tags=["sources"],
    route_class=DishkaRoute,
)


class SourceInfo(BaseModel):
    source_id: str
    name: str


class SourceListResponse(BaseModel):
    total: int
    sources: list[SourceInfo]


@router.get("")
async def list_sources(adapters: FromDishka[AdapterRegistry]) -> SourceListResponse:
    """List registered adapters in invocation order."""
    return SourceListResponse(
        total=len(adapters),
        sources=[SourceInfo(source_id=a.source_id, name=a.name) for a in adapters],
    )
