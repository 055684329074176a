"""Unit tests for the market data adapters."""

import httpx
import pytest

from observatory.domain.shared.model.record import Category
from observatory.domain.shared.model.source import SourceOutcome
from observatory.infrastructure.source.markets import (
    CoinGeckoAdapter,
    CoinGeckoConfig,
    ExchangeRateAdapter,
    ExchangeRateConfig,
    FearGreedAdapter,
    FearGreedConfig,
    YahooIndicesAdapter,
    YahooIndicesConfig,
    change_percent,
)


def chart(symbol: str, price: float, previous: float | None) -> dict:
    meta = {"symbol": symbol, "regularMarketPrice": price, "regularMarketTime": 1717243200}
    if previous is not None:
        meta["chartPreviousClose"] = previous
    return {"chart": {"result": [{"meta": meta}], "error": None}}


class TestCoinGeckoAdapter:
    @pytest.mark.asyncio
    async def test_change_metric_per_coin(self, make_context):
        body = [
            {"id": "bitcoin", "symbol": "btc", "name": "Bitcoin", "price_change_percentage_24h": 22.0},
            {"id": "ethereum", "symbol": "eth", "name": "Ethereum", "price_change_percentage_24h": -3.5},
            {"id": "tether", "symbol": "usdt", "name": "Tether", "price_change_percentage_24h": None},
        ]
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=body)

        adapter = CoinGeckoAdapter.from_context(CoinGeckoConfig(limit=2), make_context(handler))

        result = await adapter.fetch()

        assert seen[0].url.params["vs_currency"] == "usd"
        assert [(m.id, m.value) for m in result.metrics] == [
            ("COINGECKO-bitcoin", 22.0),
            ("COINGECKO-ethereum", -3.5),
        ]
        assert result.metrics[0].kind == "crypto_change_24h"
        assert result.metrics[0].category is Category.FINANCE
        assert result.metrics[0].label == "Bitcoin (BTC) 24h"


class TestFearGreedAdapter:
    @pytest.mark.asyncio
    async def test_current_value_is_metric(self, make_context):
        body = {
            "data": [
                {"value": "12", "value_classification": "Extreme Fear", "timestamp": "1717200000"},
                {"value": "30", "value_classification": "Fear", "timestamp": "1717113600"},
            ]
        }
        adapter = FearGreedAdapter.from_context(FearGreedConfig(), make_context(lambda r: httpx.Response(200, json=body)))

        result = await adapter.fetch()

        [metric] = result.metrics
        assert metric.kind == "fear_greed"
        assert metric.value == 12.0
        assert metric.label == "Fear & Greed Index (Extreme Fear)"

    @pytest.mark.asyncio
    async def test_empty_data_is_parse_error(self, make_context):
        adapter = FearGreedAdapter.from_context(
            FearGreedConfig(), make_context(lambda r: httpx.Response(200, json={"data": []}))
        )

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.PARSE_ERROR


class TestYahooIndicesAdapter:
    def test_change_percent(self):
        assert change_percent(102.0, 100.0) == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_failed_symbol_only_drops_its_metric(self, make_context, router):
        handler = router(
            {
                "/v8/finance/chart/^GSPC": httpx.Response(200, json=chart("^GSPC", 5100.0, 5000.0)),
                "/v8/finance/chart/^DJI": httpx.Response(500),
            }
        )
        config = YahooIndicesConfig(symbols={"^GSPC": "S&P 500", "^DJI": "Dow Jones"})
        adapter = YahooIndicesAdapter.from_context(config, make_context(handler))

        result = await adapter.fetch()

        assert result.ok
        [metric] = result.metrics
        assert metric.id == "YAHOO-^GSPC"
        assert metric.label == "S&P 500"
        assert metric.value == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_all_symbols_failing_fails_source(self, make_context):
        config = YahooIndicesConfig(symbols={"^GSPC": "S&P 500"})
        adapter = YahooIndicesAdapter.from_context(config, make_context(lambda r: httpx.Response(429)))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.PARSE_ERROR


class TestExchangeRateAdapter:
    @pytest.mark.asyncio
    async def test_configured_currencies_become_rate_metrics(self, make_context):
        body = {
            "base": "USD",
            "time_last_updated": 1717200000,
            "rates": {"USD": 1, "EUR": 0.92, "JPY": 157.3, "BRL": 5.2},
        }
        config = ExchangeRateConfig(currencies=["EUR", "GBP", "JPY"])
        adapter = ExchangeRateAdapter.from_context(config, make_context(lambda r: httpx.Response(200, json=body)))

        result = await adapter.fetch()

        assert result.ok
        assert [(m.id, m.label, m.value, m.unit) for m in result.metrics] == [
            ("FX-USDEUR", "USD/EUR", 0.92, "EUR"),
            ("FX-USDJPY", "USD/JPY", 157.3, "JPY"),
        ]
        assert all(m.category is Category.FINANCE for m in result.metrics)
        assert result.metrics[0].timestamp.timestamp() == 1717200000

    @pytest.mark.asyncio
    async def test_no_quoted_currency_fails_source(self, make_context):
        body = {"base": "USD", "rates": {"BRL": 5.2}}
        adapter = ExchangeRateAdapter.from_context(
            ExchangeRateConfig(currencies=["EUR"]), make_context(lambda r: httpx.Response(200, json=body))
        )

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.PARSE_ERROR
        assert "EUR" in result.error

    @pytest.mark.asyncio
    async def test_missing_rates_is_parse_error(self, make_context):
        adapter = ExchangeRateAdapter.from_context(
            ExchangeRateConfig(), make_context(lambda r: httpx.Response(200, json={"result": "error"}))
        )

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.PARSE_ERROR
