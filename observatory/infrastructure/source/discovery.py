"""Source discovery and configuration validation.

Built-in adapters are always available. Third-party adapters are discovered
via entry points in the ``observatory.sources`` group.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from observatory.domain.aggregation.model.registry import AdapterRegistry
from observatory.infrastructure.source.abuse_ch import FeodoAdapter, URLhausAdapter
from observatory.infrastructure.source.base import HttpSourceAdapter, SourceContext
from observatory.infrastructure.source.cve_circl import CveCirclAdapter
from observatory.infrastructure.source.ethereum import EthereumAdapter
from observatory.infrastructure.source.ioda import IodaAdapter
from observatory.infrastructure.source.launches import LaunchLibraryAdapter, SpaceXAdapter
from observatory.infrastructure.source.markets import (
    CoinGeckoAdapter,
    ExchangeRateAdapter,
    FearGreedAdapter,
    YahooIndicesAdapter,
)
from observatory.infrastructure.source.news import (
    DEFAULT_SUBREDDITS,
    GdeltAdapter,
    HackerNewsAdapter,
    RedditAdapter,
)
from observatory.infrastructure.source.opensky import OpenSkyAdapter
from observatory.infrastructure.source.ransomware_live import RansomwareLiveAdapter
from observatory.infrastructure.source.statuspage import DEFAULT_PAGES, StatuspageAdapter
from observatory.infrastructure.source.swpc import (
    SwpcAlertsAdapter,
    SwpcConditionsAdapter,
    SwpcFlaresAdapter,
)

if TYPE_CHECKING:
    from observatory.config import SourceEntry

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "observatory.sources"

# Registration order is the default registry order
BUILTIN_SOURCES: tuple[type[HttpSourceAdapter], ...] = (
    URLhausAdapter,
    RansomwareLiveAdapter,
    FeodoAdapter,
    CveCirclAdapter,
    SwpcAlertsAdapter,
    SwpcFlaresAdapter,
    SwpcConditionsAdapter,
    SpaceXAdapter,
    LaunchLibraryAdapter,
    IodaAdapter,
    StatuspageAdapter,
    CoinGeckoAdapter,
    FearGreedAdapter,
    YahooIndicesAdapter,
    ExchangeRateAdapter,
    EthereumAdapter,
    OpenSkyAdapter,
    GdeltAdapter,
    HackerNewsAdapter,
    RedditAdapter,
)


def discover_sources() -> dict[str, type[HttpSourceAdapter]]:
    """Collect built-in adapters plus any registered via entry points.

    Returns:
        Dict mapping adapter type names to their classes.

    Example pyproject.toml entry:
        [project.entry-points."observatory.sources"]
        my-feed = "my_package.feed:MyFeedAdapter"
    """
    sources: dict[str, type[HttpSourceAdapter]] = {cls.name: cls for cls in BUILTIN_SOURCES}

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            cls = ep.load()
            _validate_source_class(cls, ep.name)
            sources[ep.name] = cls
            logger.debug("Discovered source: %s -> %s", ep.name, cls.__name__)
        except Exception as e:
            logger.warning("Failed to load source '%s': %s", ep.name, e)

    return sources


def _validate_source_class(cls: Any, name: str) -> None:
    """Validate that a class can be used as a source adapter.

    Raises:
        TypeError: If the class lacks the adapter class attributes.
    """
    if not isinstance(cls, type):
        raise TypeError(f"Source {name} must be a class, got {type(cls).__name__}")
    if not hasattr(cls, "name"):
        raise TypeError(f"Source {name} missing 'name' class attribute")
    if not hasattr(cls, "config_class"):
        raise TypeError(f"Source {name} missing 'config_class' class attribute")
    if not issubclass(cls.config_class, BaseModel):
        raise TypeError(f"Source {name} config_class must be a Pydantic BaseModel")
    if not hasattr(cls, "from_context"):
        raise TypeError(f"Source {name} missing 'from_context' constructor")


def default_source_entries() -> list[SourceEntry]:
    """Every built-in adapter with default config, one entry per status page and subreddit."""
    from observatory.config import SourceEntry

    entries: list[SourceEntry] = []
    for cls in BUILTIN_SOURCES:
        if cls is StatuspageAdapter:
            entries.extend(
                SourceEntry(source=cls.name, name=key, config={"service": service, "url": url})
                for key, (service, url) in DEFAULT_PAGES.items()
            )
        elif cls is RedditAdapter:
            entries.extend(
                SourceEntry(source=cls.name, name=subreddit, config={"subreddit": subreddit})
                for subreddit in DEFAULT_SUBREDDITS
            )
        else:
            entries.append(SourceEntry(source=cls.name))
    return entries


def source_id_for(entry: SourceEntry) -> str:
    """``<source>`` or ``<source>:<name>`` when an instance name is given."""
    return f"{entry.source}:{entry.name}" if entry.name else entry.source


class SourceConfigError(Exception):
    """Raised when source configuration validation fails."""

    def __init__(
        self,
        source_name: str,
        source_id: str,
        validation_error: ValidationError,
    ) -> None:
        self.source_name = source_name
        self.source_id = source_id
        self.validation_error = validation_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format a human-readable error message."""
        lines = [f"Invalid config for source '{self.source_name}' ({self.source_id}):"]
        for err in self.validation_error.errors():
            loc = ".".join(str(x) for x in err.get("loc", []))
            msg = err.get("msg", "Unknown error")
            lines.append(f"  - {loc}: {msg}")
        return "\n".join(lines)


def validate_all_source_configs(
    entries: list[SourceEntry],
    available_sources: dict[str, type[HttpSourceAdapter]],
) -> dict[str, tuple[type[HttpSourceAdapter], BaseModel]]:
    """Validate every enabled source entry.

    Returns:
        Dict of source id -> (class, validated_config), in entry order.

    Raises:
        SourceConfigError: If any configuration is invalid.
        ValueError: If an unknown source type is specified or a source id repeats.
    """
    validated: dict[str, tuple[type[HttpSourceAdapter], BaseModel]] = {}

    for entry in entries:
        if not entry.enabled:
            logger.info("Source %s disabled by configuration", source_id_for(entry))
            continue

        source_id = source_id_for(entry)
        if source_id in validated:
            raise ValueError(
                f"Duplicate source '{source_id}'. Give repeated sources distinct names."
            )

        if entry.source not in available_sources:
            available = ", ".join(sorted(available_sources.keys())) or "(none)"
            raise ValueError(f"Unknown source type '{entry.source}'. Available: {available}")

        source_cls = available_sources[entry.source]
        try:
            config = source_cls.config_class.model_validate(entry.config)
        except ValidationError as e:
            raise SourceConfigError(
                source_name=entry.source,
                source_id=source_id,
                validation_error=e,
            ) from e
        validated[source_id] = (source_cls, config)

    return validated


def build_registry(
    entries: list[SourceEntry],
    context: SourceContext,
    available_sources: dict[str, type[HttpSourceAdapter]] | None = None,
) -> AdapterRegistry:
    """Validate configuration and instantiate adapters in entry order.

    An empty entry list means every built-in adapter with defaults.
    """
    available = available_sources if available_sources is not None else discover_sources()
    validated = validate_all_source_configs(entries or default_source_entries(), available)

    adapters = [
        source_cls.from_context(config, context, source_id=source_id)
        for source_id, (source_cls, config) in validated.items()
    ]
    logger.info("Registered %d sources: %s", len(adapters), ", ".join(validated))
    return AdapterRegistry(adapters)
