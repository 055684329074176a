"""Ethereum network stats over public JSON-RPC."""

from pydantic import BaseModel

from observatory.domain.shared.error import ParseError
from observatory.domain.shared.model.record import Category, DerivedMetric
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.sdk.source.config import SourceConfig

WEI_PER_GWEI = 1e9


class EthereumConfig(SourceConfig):
    rpc_url: str = "https://eth.llamarpc.com"


class RpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: str | None = None
    error: dict | None = None


def parse_hex_quantity(value: str | None) -> int:
    if not value:
        raise ParseError("JSON-RPC response has no result")
    try:
        return int(value, 16)
    except ValueError as e:
        raise ParseError(f"JSON-RPC result is not a hex quantity: {value!r}") from e


class EthereumAdapter(HttpSourceAdapter[EthereumConfig]):
    """Block height (primary call) and gas price (follow-up)."""

    name = "ethereum"
    config_class = EthereumConfig

    async def collect(self) -> SourcePayload:
        block = await self.get_json(self._config.rpc_url, RpcResponse, **self._rpc("eth_blockNumber", 1))
        if block.error:
            raise ParseError(f"eth_blockNumber failed: {block.error.get('message', block.error)}")
        height = parse_hex_quantity(block.result)

        now = self._clock.now()
        metrics = [self._metric("block_height", "ETH Block Height", float(height), "", now)]

        gas = await self.try_get_json(self._config.rpc_url, RpcResponse, **self._rpc("eth_gasPrice", 2))
        if gas is not None and gas.result:
            try:
                gwei = parse_hex_quantity(gas.result) / WEI_PER_GWEI
            except ParseError as e:
                self.log_degraded(e)
            else:
                metrics.append(self._metric("gas_price_gwei", "ETH Gas Price", round(gwei, 1), "Gwei", now))

        return SourcePayload(metrics=metrics)

    @staticmethod
    def _rpc(method: str, request_id: int) -> dict:
        return {
            "method": "POST",
            "json": {"jsonrpc": "2.0", "method": method, "params": [], "id": request_id},
        }

    def _metric(self, kind: str, label: str, value: float, unit: str, timestamp) -> DerivedMetric:
        return DerivedMetric(
            id=f"ETH-{kind}",
            kind=kind,
            label=label,
            value=value,
            unit=unit,
            category=Category.FINANCE,
            source="Ethereum RPC",
            timestamp=timestamp,
        )
