"""AggregationPipeline - concurrent fan-out over every registered source adapter."""

import asyncio
import logging
from collections import Counter

import logfire

from observatory.domain.aggregation.model.registry import AdapterRegistry
from observatory.domain.shared.model.source import SourceOutcome, SourceResult
from observatory.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AggregationPipeline(Service):
    """Invokes all adapters concurrently and settles every one of them.

    One adapter's failure or slowness never blocks or aborts another. Results
    come back in registry order regardless of completion order.
    """

    adapters: AdapterRegistry

    async def run(self) -> list[SourceResult]:
        adapters = list(self.adapters)
        if not adapters:
            logger.warning("No source adapters registered")
            return []

        with logfire.span("RunSources", source_count=len(adapters)) as span:
            settled = await asyncio.gather(
                *(adapter.fetch() for adapter in adapters),
                return_exceptions=True,
            )

            results: list[SourceResult] = []
            for adapter, outcome in zip(adapters, settled, strict=True):
                if isinstance(outcome, SourceResult):
                    results.append(outcome)
                    continue
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                # Adapters convert their own failures; anything reaching here is a defect
                logger.error(
                    "Adapter %s raised instead of returning a result",
                    adapter.source_id,
                    exc_info=outcome,
                )
                results.append(
                    SourceResult.failure(
                        adapter.source_id,
                        SourceOutcome.PARSE_ERROR,
                        f"Adapter raised {outcome!r}",
                    )
                )

            counts = Counter(r.outcome.value for r in results)
            span.set_attribute("outcomes", dict(counts))
            failed = [r.source_id for r in results if not r.ok]
            if failed:
                logfire.warn(
                    "{failed_count} of {total} sources failed",
                    failed_count=len(failed),
                    total=len(results),
                    failed=failed,
                )
            else:
                logfire.info("All {total} sources succeeded", total=len(results))

        return results
