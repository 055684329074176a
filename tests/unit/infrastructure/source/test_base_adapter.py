"""Unit tests for HttpSourceAdapter failure mapping and truncation."""

import asyncio

import httpx
import pytest
from pydantic import BaseModel

from observatory.domain.shared.error import ParseError
from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.domain.shared.model.source import SourceOutcome
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload, parse_body
from observatory.sdk.source.config import SourceConfig

URL = "https://feed.example.test/items"


class Item(BaseModel):
    id: int
    title: str


class ItemConfig(SourceConfig):
    url: str = URL


class ItemAdapter(HttpSourceAdapter[ItemConfig]):
    name = "items"
    config_class = ItemConfig

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.unauthorized_calls = 0

    async def collect(self) -> SourcePayload:
        items: list[Item] = await self.get_json(self._config.url, list[Item])
        now = self._clock.now()
        return SourcePayload(
            events=[
                CanonicalEvent(
                    id=f"ITEM-{item.id}",
                    category=Category.CYBER,
                    kind="item",
                    severity=Severity.LOW,
                    timestamp=now,
                    label=item.title,
                    source="Items",
                )
                for item in items
            ]
        )

    def on_unauthorized(self) -> None:
        self.unauthorized_calls += 1


class ExplodingAdapter(ItemAdapter):
    async def collect(self) -> SourcePayload:
        raise RuntimeError("bug in adapter")


def make_adapter(make_context, handler, cls=ItemAdapter, **config):
    return cls.from_context(ItemConfig(**config), make_context(handler))


class TestFetchSuccess:
    @pytest.mark.asyncio
    async def test_success_carries_normalized_events(self, make_context):
        adapter = make_adapter(
            make_context,
            lambda r: httpx.Response(200, json=[{"id": 1, "title": "a"}, {"id": 2, "title": "b"}]),
        )

        result = await adapter.fetch()

        assert result.ok
        assert result.source_id == "items"
        assert [e.id for e in result.events] == ["ITEM-1", "ITEM-2"]
        assert result.elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_limit_truncates_events(self, make_context):
        items = [{"id": i, "title": str(i)} for i in range(10)]
        adapter = make_adapter(make_context, lambda r: httpx.Response(200, json=items), limit=3)

        result = await adapter.fetch()

        assert [e.id for e in result.events] == ["ITEM-0", "ITEM-1", "ITEM-2"]

    @pytest.mark.asyncio
    async def test_empty_provider_list_is_success(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(200, json=[]))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.SUCCESS
        assert result.events == []

    def test_instance_name_overrides_source_id(self, make_context):
        adapter = ItemAdapter.from_context(
            ItemConfig(), make_context(lambda r: httpx.Response(200)), source_id="items:eu"
        )

        assert adapter.source_id == "items:eu"


class TestFetchFailures:
    @pytest.mark.asyncio
    async def test_non_2xx_is_http_error_with_status(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(502))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.HTTP_ERROR
        assert result.http_status == 502
        assert result.events == []

    @pytest.mark.asyncio
    async def test_401_is_auth_error_and_invokes_hook(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(401))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.AUTH_ERROR
        assert adapter.unauthorized_calls == 1

    @pytest.mark.asyncio
    async def test_invalid_json_is_parse_error(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(200, text="<html>rate limited</html>"))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.PARSE_ERROR
        assert "not valid JSON" in result.error

    @pytest.mark.asyncio
    async def test_schema_mismatch_is_parse_error(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(200, json={"items": []}))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.PARSE_ERROR

    @pytest.mark.asyncio
    async def test_timeout_uses_configured_deadline(self, make_context):
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, json=[])

        adapter = make_adapter(make_context, slow, timeout=0.05)

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.TIMEOUT

    @pytest.mark.asyncio
    async def test_network_failure(self, make_context):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        adapter = make_adapter(make_context, refuse)

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.NETWORK_ERROR

    @pytest.mark.asyncio
    async def test_malformed_url_is_config_error(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(200, json=[]), url="http://[::1")

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.CONFIG_ERROR
        assert "Invalid request" in result.error

    @pytest.mark.asyncio
    async def test_unexpected_exception_never_escapes(self, make_context):
        adapter = make_adapter(make_context, lambda r: httpx.Response(200), cls=ExplodingAdapter)

        result = await adapter.fetch()

        assert not result.ok
        assert result.outcome is SourceOutcome.PARSE_ERROR
        assert "bug in adapter" in result.error


class TestParseBody:
    def test_requires_json_content_type_when_asked(self):
        response = httpx.Response(200, text="[]", headers={"content-type": "text/plain"})

        with pytest.raises(ParseError, match="content-type"):
            parse_body(response, list[int], require_json_content_type=True)

    def test_validates_against_schema(self):
        response = httpx.Response(200, json=[1, 2, 3])

        assert parse_body(response, list[int]) == [1, 2, 3]
