import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

from observatory.domain.report.model.value import SnapshotCaps
from observatory.infrastructure.http.fetcher import DEFAULT_USER_AGENT

# =============================================================================
# Source Configuration
# =============================================================================


class SourceEntry(BaseModel):
    """Configuration for one registered source adapter.

    The `config` field is validated at startup against the adapter's
    config_class, so third-party adapters define their own schemas.
    """

    source: str  # Adapter type, e.g. "urlhaus" or "statuspage"
    name: str | None = None  # Instance name; source id becomes "<source>:<name>"
    config: dict[str, Any] = {}  # Validated at startup by the adapter's config_class
    enabled: bool = True


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by OBSERVATORY_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("OBSERVATORY_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Observatory"
    version: str = "0.1.0"
    description: str = "Aggregated threat, infrastructure, space, aviation and market intelligence"


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from OBSERVATORY_LOG_FILE env var."""
        return os.environ.get("OBSERVATORY_LOG_FILE")


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by every source adapter."""

    user_agent: str = DEFAULT_USER_AGENT
    default_timeout: float = Field(default=10.0, gt=0)  # Per-call deadline unless a source overrides it
    connect_timeout: float = Field(default=5.0, gt=0)
    max_connections: int = Field(default=50, gt=0)


class OpenSkyAuthConfig(BaseModel):
    """OpenSky OAuth2 client-credentials settings."""

    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://auth.opensky-network.org/auth/realms/opensky-network/protocol/openid-connect/token"
    token_timeout: float = Field(default=8.0, gt=0)
    expiry_buffer_seconds: float = Field(default=60.0, ge=0)

    @model_validator(mode="after")
    def require_complete_pair(self) -> Self:
        if bool(self.client_id) != bool(self.client_secret):
            raise ValueError("opensky.client_id and opensky.client_secret must be set together")
        return self

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class SnapshotConfig(BaseModel):
    """Collection caps applied to each snapshot."""

    caps: SnapshotCaps = SnapshotCaps()
    seed: int | None = None  # Seeds marker jitter; None = nondeterministic


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    logging: LoggingConfig = LoggingConfig()
    http: HttpConfig = HttpConfig()
    opensky: OpenSkyAuthConfig = OpenSkyAuthConfig()
    snapshot: SnapshotConfig = SnapshotConfig()
    sources: list[SourceEntry] = []  # Empty = every built-in source with defaults

    model_config = {
        "env_prefix": "OBSERVATORY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows OBSERVATORY_OPENSKY__CLIENT_ID override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - OBSERVATORY_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so every module logger
    picks up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
