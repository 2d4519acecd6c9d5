# config.py
# Description: Settings for the e2e harness, loaded from YAML with environment overrides
#
# Imports
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Any, Dict, Optional, Tuple, Type, Union
#
# 3rd-party imports
import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, BeforeValidator, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
#
# Local imports
from pinstack_e2e.core.exceptions import ConfigurationError

#######################################################################################################################
#
# Durations

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: Union[str, int, float, timedelta]) -> timedelta:
    """Parse ``100ms``, ``1.5s``, ``2m``, ``1h30m`` or a number of seconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"negative duration: {value!r}")
        return timedelta(seconds=value)

    text = str(value).strip()
    if not text:
        raise ValueError("empty duration")
    try:
        return parse_duration(float(text))
    except ValueError:
        pass

    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=total)


Duration = Annotated[timedelta, BeforeValidator(parse_duration)]

#######################################################################################################################
#
# Settings Sections

class ApiSettings(BaseModel):
    base_url: str = Field(
        default="http://localhost:8080/api",
        description="Gateway base URL; request paths such as /v1/users are appended to it"
    )
    timeout: Duration = Field(
        default=timedelta(seconds=10),
        description="Per-request timeout"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for a request that keeps answering 429"
    )
    retry_delay: float = Field(
        default=0.5,
        ge=0,
        description="Base backoff in seconds between 429 retries"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class OutboxSettings(BaseModel):
    poll_interval: Duration = Field(
        default=timedelta(milliseconds=100),
        description="Interval at which the outbox worker publishes events; first poll delay for side effects"
    )


class RunSettings(BaseModel):
    concurrent: int = Field(
        default=5,
        ge=1,
        description="Worker threads for sub-cases sharing one test context"
    )
    test_timeout: Duration = Field(
        default=timedelta(minutes=2),
        description="Upper bound for a single scenario (pytest-timeout)"
    )
    eventual_timeout: Duration = Field(
        default=timedelta(seconds=10),
        description="Budget for eventually-consistent side effects to appear"
    )
    cleanup: bool = Field(
        default=True,
        description="Delete tracked entities after each scenario"
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the harness logger"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


#######################################################################################################################
#
# Settings Class

class Settings(BaseSettings):
    """Harness configuration.

    Precedence, highest first: environment variables (``PINSTACK_`` prefix,
    ``__`` between section and key), ``.env``, the YAML config file, defaults.
    """

    env: str = Field(
        default="test",
        description="Deployment flavour: local, test, dev or prod. Controls log format"
    )
    api: ApiSettings = Field(default_factory=ApiSettings)
    outbox: OutboxSettings = Field(default_factory=OutboxSettings)
    test: RunSettings = Field(default_factory=RunSettings)

    model_config = {
        "env_prefix": "PINSTACK_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs and must not shadow the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


#######################################################################################################################
#
# Loading

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "Config_Files" / "test-config.yaml"
CONFIG_PATH_ENV = "PINSTACK_CONFIG_FILE"


def resolve_config_path(config_path: Optional[Union[str, Path]] = None) -> Path:
    """Explicit path, then ``PINSTACK_CONFIG_FILE``, then the packaged default."""
    if config_path:
        return Path(config_path)
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Read a YAML config file, expanding ``${VAR}`` references."""
    if not path.is_file():
        raise ConfigurationError("Config file not found", str(path))
    try:
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(os.path.expandvars(raw))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read config file: {e}", str(path)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping at the top level", str(path))
    return data


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = ".env",
) -> Settings:
    """Build Settings once for the process; callers pass the result down explicitly."""
    if env_file and Path(env_file).is_file():
        load_dotenv(dotenv_path=str(env_file), override=False)

    path = resolve_config_path(config_path)
    data = load_yaml_config(path)
    try:
        settings = Settings(_env_file=str(env_file) if env_file else None, **data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", str(path)) from e

    logger.debug(f"Loaded settings from {path} (env={settings.env}, base_url={settings.api.base_url})")
    return settings

#
# End of config.py
#######################################################################################################################
