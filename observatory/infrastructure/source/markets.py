"""Market data: CoinGecko crypto markets, Fear & Greed sentiment, Yahoo index quotes, USD exchange rates."""

import asyncio
import logging
from urllib.parse import quote

from pydantic import BaseModel, Field

from observatory.domain.shared.error import ParseError
from observatory.domain.shared.model.record import Category, DerivedMetric
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

logger = logging.getLogger(__name__)

# =============================================================================
# CoinGecko
# =============================================================================


class CoinGeckoConfig(SourceConfig):
    limit: int = Field(default=10, ge=0)  # Coins turned into change metrics
    url: str = "https://api.coingecko.com/api/v3/coins/markets"
    per_page: int = Field(default=15, gt=0)
    vs_currency: str = "usd"


class CoinMarket(BaseModel):
    id: str
    symbol: str
    name: str
    current_price: float | None = None
    market_cap: float | None = None
    total_volume: float | None = None
    price_change_24h: float | None = None
    price_change_percentage_24h: float | None = None
    last_updated: str | None = None


class CoinGeckoAdapter(HttpSourceAdapter[CoinGeckoConfig]):
    """24h price change per coin, in market cap order."""

    name = "coingecko"
    config_class = CoinGeckoConfig

    async def collect(self) -> SourcePayload:
        coins: list[CoinMarket] = await self.get_json(
            self._config.url,
            list[CoinMarket],
            params={
                "vs_currency": self._config.vs_currency,
                "order": "market_cap_desc",
                "per_page": self._config.per_page,
                "page": 1,
                "sparkline": "false",
                "price_change_percentage": "24h",
            },
        )
        now = self._clock.now()

        metrics = [
            DerivedMetric(
                id=f"COINGECKO-{coin.id}",
                kind="crypto_change_24h",
                label=f"{coin.name} ({coin.symbol.upper()}) 24h",
                value=coin.price_change_percentage_24h or 0.0,
                unit="%",
                category=Category.FINANCE,
                source="CoinGecko",
                timestamp=parse_timestamp(coin.last_updated, now),
            )
            for coin in coins[: self._config.limit]
        ]
        return SourcePayload(metrics=metrics)


# =============================================================================
# Fear & Greed
# =============================================================================


class FearGreedConfig(SourceConfig):
    url: str = "https://api.alternative.me/fng/"


class FearGreedEntry(BaseModel):
    value: int
    value_classification: str = ""
    timestamp: int | None = None


class FearGreedResponse(BaseModel):
    data: list[FearGreedEntry] = Field(default_factory=list)


class FearGreedAdapter(HttpSourceAdapter[FearGreedConfig]):
    """Crypto market sentiment index, 0 (extreme fear) to 100 (extreme greed)."""

    name = "fear_greed"
    config_class = FearGreedConfig

    async def collect(self) -> SourcePayload:
        body: FearGreedResponse = await self.get_json(
            self._config.url, FearGreedResponse, params={"limit": 2}
        )
        if not body.data:
            raise ParseError("Fear & Greed index returned no data points")

        current = body.data[0]
        label = "Fear & Greed Index"
        if current.value_classification:
            label = f"{label} ({current.value_classification})"
        metric = DerivedMetric(
            id="FNG-current",
            kind="fear_greed",
            label=label,
            value=float(current.value),
            category=Category.FINANCE,
            source="alternative.me",
            timestamp=parse_timestamp(current.timestamp, self._clock.now()),
        )
        return SourcePayload(metrics=[metric])


# =============================================================================
# Yahoo Finance indices
# =============================================================================

DEFAULT_INDICES: dict[str, str] = {
    "^GSPC": "S&P 500",
    "^DJI": "Dow Jones",
    "^IXIC": "NASDAQ",
    "^FTSE": "FTSE 100",
    "^N225": "Nikkei 225",
}


class YahooIndicesConfig(SourceConfig):
    base_url: str = "https://query1.finance.yahoo.com/v8/finance/chart"
    symbols: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_INDICES))


class ChartMeta(BaseModel):
    symbol: str
    regularMarketPrice: float
    previousClose: float | None = None
    chartPreviousClose: float | None = None
    regularMarketTime: int | None = None
    shortName: str | None = None


class ChartResult(BaseModel):
    meta: ChartMeta


class Chart(BaseModel):
    result: list[ChartResult] | None = None


class ChartResponse(BaseModel):
    chart: Chart


def change_percent(price: float, previous_close: float) -> float:
    return (price - previous_close) / previous_close * 100


class YahooIndicesAdapter(HttpSourceAdapter[YahooIndicesConfig]):
    """Daily change per stock index.

    Symbols are fetched concurrently. A failed symbol only drops its metric;
    the source fails when no symbol succeeds.
    """

    name = "yahoo_indices"
    config_class = YahooIndicesConfig

    async def collect(self) -> SourcePayload:
        symbols = list(self._config.symbols.items())
        responses = await asyncio.gather(
            *(
                self.try_get_json(
                    f"{self._config.base_url}/{quote(symbol, safe='')}",
                    ChartResponse,
                    params={"interval": "1d", "range": "1d"},
                )
                for symbol, _ in symbols
            )
        )

        now = self._clock.now()
        metrics = []
        for (symbol, name), response in zip(symbols, responses, strict=True):
            if response is None or not response.chart.result:
                continue
            meta = response.chart.result[0].meta
            previous = meta.previousClose or meta.chartPreviousClose
            if not previous:
                logger.info("No previous close for %s, skipping", symbol)
                continue
            metrics.append(
                DerivedMetric(
                    id=f"YAHOO-{symbol}",
                    kind="index_change",
                    label=name,
                    value=round(change_percent(meta.regularMarketPrice, previous), 4),
                    unit="%",
                    category=Category.FINANCE,
                    source="Yahoo Finance",
                    timestamp=parse_timestamp(meta.regularMarketTime, now),
                )
            )

        if symbols and not metrics:
            raise ParseError(f"No usable quote for any of {len(symbols)} index symbols")
        return SourcePayload(metrics=metrics)


# =============================================================================
# Exchange rates
# =============================================================================

MAJOR_CURRENCIES: tuple[str, ...] = ("EUR", "GBP", "JPY", "CNY", "CHF", "CAD", "AUD", "INR")


class ExchangeRateConfig(SourceConfig):
    url: str = "https://api.exchangerate-api.com/v4/latest/USD"
    currencies: list[str] = Field(default_factory=lambda: list(MAJOR_CURRENCIES))


class ExchangeRateResponse(BaseModel):
    base: str = "USD"
    time_last_updated: int | None = None
    rates: dict[str, float]


class ExchangeRateAdapter(HttpSourceAdapter[ExchangeRateConfig]):
    """Spot rate of the base currency against each configured currency.

    Currencies missing from the response are skipped; the source fails when
    none of them is quoted.
    """

    name = "exchange_rates"
    config_class = ExchangeRateConfig

    async def collect(self) -> SourcePayload:
        body: ExchangeRateResponse = await self.get_json(self._config.url, ExchangeRateResponse)
        timestamp = parse_timestamp(body.time_last_updated, self._clock.now())

        metrics = [
            DerivedMetric(
                id=f"FX-{body.base}{currency}",
                kind="fx_rate",
                label=f"{body.base}/{currency}",
                value=body.rates[currency],
                unit=currency,
                category=Category.FINANCE,
                source="ExchangeRate-API",
                timestamp=timestamp,
            )
            for currency in self._config.currencies
            if currency in body.rates
        ]
        if self._config.currencies and not metrics:
            raise ParseError(f"None of {', '.join(self._config.currencies)} quoted against {body.base}")
        return SourcePayload(metrics=metrics)
