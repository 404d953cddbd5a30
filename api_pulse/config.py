"""Configuration management with Pydantic settings."""

import os
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProbeTarget(BaseModel):
    """An external endpoint under monitoring."""
    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    enabled: bool = True

    @field_validator('name', 'url')
    @classmethod
    def must_not_be_blank(cls, v, info):
        if not v or not v.strip():
            raise ValueError(f'{info.field_name} must not be empty')
        return v.strip()


class DatabaseConfig(BaseModel):
    """Database configuration."""
    url: str = "sqlite+aiosqlite:///./data/api_pulse.db"
    echo: bool = False


class ProbeConfig(BaseModel):
    """Prober settings."""
    timeout_ms: int = 5000
    slow_threshold_ms: int = 2000
    max_concurrent: int = 20

    @field_validator('timeout_ms')
    @classmethod
    def timeout_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('timeout_ms must be at least 1')
        return v

    @field_validator('max_concurrent')
    @classmethod
    def max_concurrent_must_be_positive(cls, v):
        if v < 1:
            raise ValueError('max_concurrent must be at least 1')
        return v


class SchedulerConfig(BaseModel):
    """Probe cycle scheduling."""
    enabled: bool = True
    interval_seconds: int = 300

    @field_validator('interval_seconds')
    @classmethod
    def interval_must_be_reasonable(cls, v):
        if v < 10:
            raise ValueError('interval_seconds must be at least 10 seconds')
        return v


class RetentionConfig(BaseModel):
    """Retention defaults."""
    default_days: int = 30

    @field_validator('default_days')
    @classmethod
    def days_must_be_non_negative(cls, v):
        if v < 0:
            raise ValueError('default_days must be non-negative')
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "json"
    file: Optional[str] = "logs/api_pulse.log"
    console: bool = True

    @field_validator('level')
    @classmethod
    def log_level_must_be_valid(cls, v):
        if isinstance(v, str):
            v = v.upper()
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v not in valid_levels:
            raise ValueError(f'log level must be one of {valid_levels}')
        return v

    @field_validator('format')
    @classmethod
    def format_must_be_known(cls, v):
        if v not in ('json', 'text'):
            raise ValueError('log format must be "json" or "text"')
        return v


class PrometheusConfig(BaseModel):
    """Prometheus metrics configuration."""
    enabled: bool = True
    path: str = "/metrics"


class CORSConfig(BaseModel):
    """CORS configuration."""
    enabled: bool = True
    allow_origins: List[str] = Field(default_factory=lambda: ["*"])
    allow_credentials: bool = True
    allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class APIConfig(BaseModel):
    """API server configuration."""
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False
    cors: CORSConfig = Field(default_factory=CORSConfig)

    @field_validator('port')
    @classmethod
    def port_must_be_valid(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError('port must be between 1 and 65535')
        return v


class Config(BaseModel):
    """Main configuration class."""
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    targets: List[ProbeTarget] = Field(default_factory=list)
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @model_validator(mode='after')
    def target_names_must_be_unique(self):
        seen = set()
        for target in self.targets:
            if target.name in seen:
                raise ValueError(f'duplicate target name: {target.name}')
            seen.add(target.name)
        return self

    @property
    def enabled_targets(self) -> List[ProbeTarget]:
        return [t for t in self.targets if t.enabled]


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes", "on")


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML file; falls back to CONFIG_PATH

    Returns:
        Config: Loaded configuration

    Raises:
        FileNotFoundError: If config file doesn't exist outside development
        ValueError: If the YAML is invalid or fails validation
    """
    app_env = os.getenv("APP_ENV", "development")
    config_path = config_path or os.getenv("CONFIG_PATH", "config/config.yaml")

    config_data = {}
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}")
    elif app_env != "development":
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        config = Config(**config_data)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}")

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        config.database.url = database_url

    log_level = os.getenv("LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    scheduler_enabled = os.getenv("SCHEDULER_ENABLED")
    if scheduler_enabled is not None:
        config.scheduler.enabled = _env_flag(scheduler_enabled)

    scheduler_interval = os.getenv("SCHEDULER_INTERVAL_SECONDS")
    if scheduler_interval:
        try:
            interval = int(scheduler_interval)
        except ValueError:
            raise ValueError(
                f"SCHEDULER_INTERVAL_SECONDS must be an integer, got {scheduler_interval!r}"
            )
        if interval < 10:
            raise ValueError("SCHEDULER_INTERVAL_SECONDS must be at least 10 seconds")
        config.scheduler.interval_seconds = interval

    return config
