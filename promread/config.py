"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any, Literal, Tuple, Type

import yaml
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

DEFAULT_DATABASES: dict[str, list[str]] = {
    "flow_log": ["l4_flow_log", "l7_flow_log", "l4_packet", "l7_packet"],
    "flow_metrics": [
        "vtap_flow_port",
        "vtap_flow_edge_port",
        "vtap_app_port",
        "vtap_app_edge_port",
        "vtap_acl",
    ],
    "ext_metrics": ["ext_common"],
    "deepflow_system": ["deepflow_system"],
    "event": ["event"],
    "prometheus": ["samples"],
}

DEFAULT_EDGE_TABLES: list[str] = [
    "vtap_flow_edge_port",
    "vtap_app_edge_port",
    "l4_flow_log",
    "l7_flow_log",
]


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Priority:
    1. Explicitly provided config_path
    2. ~/.promread/config.yaml (default location)
    3. Empty dict if no file exists

    Args:
        config_path: Optional path to config file

    Returns:
        Dictionary of configuration values (flattened from nested YAML)
    """
    if config_path is None:
        config_path = Path.home() / ".promread" / "config.yaml"

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            yaml_data = yaml.safe_load(f) or {}

        flattened = {}

        if "server" in yaml_data:
            server = yaml_data["server"]
            if "host" in server:
                flattened["promread_host"] = server["host"]
            if "port" in server:
                flattened["promread_port"] = server["port"]
            if "workers" in server:
                flattened["promread_workers"] = server["workers"]

        if "clickhouse" in yaml_data:
            clickhouse = yaml_data["clickhouse"]
            if "url" in clickhouse:
                flattened["clickhouse_url"] = clickhouse["url"]
            if "user" in clickhouse:
                flattened["clickhouse_user"] = clickhouse["user"]
            if "password" in clickhouse:
                flattened["clickhouse_password"] = clickhouse["password"]
            if "timeout_seconds" in clickhouse:
                flattened["clickhouse_timeout_seconds"] = clickhouse["timeout_seconds"]

        if "prometheus" in yaml_data:
            prometheus = yaml_data["prometheus"]
            if "limit" in prometheus:
                flattened["query_limit"] = prometheus["limit"]
            if "series_limit" in prometheus:
                flattened["series_limit"] = prometheus["series_limit"]
            if "databases" in prometheus:
                flattened["databases"] = prometheus["databases"]
            if "edge_tables" in prometheus:
                flattened["edge_tables"] = prometheus["edge_tables"]
            if "system_database" in prometheus:
                flattened["system_database"] = prometheus["system_database"]
            if "virtual_namespace" in prometheus:
                flattened["virtual_namespace"] = prometheus["virtual_namespace"]

        if "tag_catalog" in yaml_data:
            tag_catalog = yaml_data["tag_catalog"]
            if "path" in tag_catalog:
                flattened["tag_catalog_path"] = tag_catalog["path"]

        if "logging" in yaml_data:
            logging = yaml_data["logging"]
            if "level" in logging:
                flattened["log_level"] = logging["level"]
            if "format" in logging:
                flattened["log_format"] = logging["format"]

        return flattened

    except Exception as e:
        import warnings

        warnings.warn(f"Failed to load config from {config_path}: {e}")
        return {}


_config_path: Path | None = None


class YamlSettingsSource(PydanticBaseSettingsSource):
    """
    Custom settings source that loads configuration from YAML file.

    This allows YAML config to be loaded with proper priority in the settings chain.
    """

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        """Not used since we override __call__."""
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Load configuration from YAML file."""
        return load_yaml_config(_config_path)


class Settings(BaseSettings):
    """
    promread configuration settings.

    Configuration priority (highest to lowest):
    1. Environment variables (e.g., PROMREAD_PORT=9000)
    2. YAML configuration file (~/.promread/config.yaml)
    3. Default values defined in this class
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    promread_host: str = Field(default="0.0.0.0", description="Server bind address")
    promread_port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    promread_workers: int = Field(
        default=1, ge=1, description="Number of worker processes"
    )

    clickhouse_url: str = Field(
        default="http://localhost:8123",
        description="ClickHouse HTTP interface URL",
    )
    clickhouse_user: str = Field(default="default", description="ClickHouse user")
    clickhouse_password: str = Field(default="", description="ClickHouse password")
    clickhouse_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single ClickHouse query",
    )

    query_limit: int = Field(
        default=10000,
        ge=1,
        description="Row cap applied as LIMIT to every translated query",
    )
    series_limit: int = Field(
        default=100,
        ge=1,
        description="Maximum number of series returned in one read response",
    )
    databases: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_DATABASES.items()},
        description="Database registry: metric-name database key to table names",
    )
    edge_tables: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EDGE_TABLES),
        description="Tables with separate client-side and server-side tag columns",
    )
    system_database: str = Field(
        default="deepflow_system",
        description="Database whose tags are stored in the generic tag column",
    )
    virtual_namespace: str = Field(
        default="prometheus",
        description="Namespace holding views for metrics without a database prefix",
    )

    tag_catalog_path: Path | None = Field(
        default=None,
        description="YAML file describing the tag columns of each table",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json", description="Log format"
    )

    @field_validator("tag_catalog_path")
    @classmethod
    def validate_paths(cls, v: Path | None) -> Path | None:
        """Ensure paths are absolute."""
        if v is not None and not v.is_absolute():
            v = v.expanduser().resolve()
        return v

    @field_validator("clickhouse_url")
    @classmethod
    def validate_clickhouse_url(cls, v: str) -> str:
        """Validate ClickHouse URL scheme."""
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("ClickHouse URL must use http or https")
        return v.rstrip("/")

    @field_validator("system_database", "virtual_namespace")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Reject names that would break out of an identifier position."""
        if not v or any(c in v for c in " `'\";."):
            raise ValueError(f"Invalid database name: {v!r}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """
        Customize settings sources priority.

        Priority order (highest to lowest):
        1. Explicit kwargs (init_settings) - for testing and programmatic config
        2. Environment variables
        3. YAML configuration file
        4. .env file
        5. Field defaults
        """
        return (
            init_settings,
            env_settings,
            YamlSettingsSource(settings_cls),
            dotenv_settings,
        )


_settings: Settings | None = None


def get_settings(config_path: Path | None = None, reload: bool = False) -> Settings:
    """
    Get global settings instance.

    Configuration loading order (highest to lowest priority):
    1. Environment variables (e.g., PROMREAD_PORT=9000)
    2. YAML configuration file (~/.promread/config.yaml)
    3. .env file
    4. Default values defined in Settings class

    Args:
        config_path: Optional path to YAML config file (defaults to ~/.promread/config.yaml)
        reload: If True, force reload settings (useful for testing)

    Returns:
        Settings instance with merged configuration
    """
    global _settings, _config_path
    if _settings is None or reload:
        _config_path = config_path

        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
