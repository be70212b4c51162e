#!/usr/bin/env python3
"""
Stack configuration.

Values are resolved in this order (later wins):

1. Defaults from ``config_constants``
2. Optional TOML file (``-c/--config`` or ``elastic-container.toml`` in the
   current directory)
3. Environment: ``ELASTIC_USERNAME``, ``ELASTIC_PASSWORD``, ``STACK_VERSION``

Example TOML::

    [stack]
    version = "7.17.0"
    network = "elastic"

    [credentials]
    password = "changeme"

    [kibana]
    max_tries = 20
    retry_delay = 30
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from .config_constants import (
    CONFIG_FILENAME,
    DEFAULT_MAX_TRIES,
    DEFAULT_NETWORK_NAME,
    DEFAULT_PASSWORD,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_DELAY,
    DEFAULT_STACK_VERSION,
    DEFAULT_USERNAME,
    ELASTIC_AGENT_IMAGE,
    ELASTICSEARCH_IMAGE,
    ELASTICSEARCH_URL,
    FLEET_URL,
    KIBANA_IMAGE,
    KIBANA_URL,
    LOCAL_ES_URL,
    LOCAL_KBN_URL,
    XSRF_HEADER_VALUE,
    image_for,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


_STRING_FIELDS = (
    'username',
    'password',
    'stack_version',
    'network_name',
    'elasticsearch_url',
    'local_es_url',
    'kibana_url',
    'local_kbn_url',
    'fleet_url',
)


@dataclass(frozen=True)
class StackConfig:
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    stack_version: str = DEFAULT_STACK_VERSION
    network_name: str = DEFAULT_NETWORK_NAME
    elasticsearch_url: str = ELASTICSEARCH_URL
    local_es_url: str = LOCAL_ES_URL
    kibana_url: str = KIBANA_URL
    local_kbn_url: str = LOCAL_KBN_URL
    fleet_url: str = FLEET_URL
    kibana_config: Optional[Path] = None
    max_tries: int = DEFAULT_MAX_TRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        for field_name in _STRING_FIELDS:
            value = getattr(self, field_name)
            if not isinstance(value, str):
                raise ConfigError(f"{field_name} must be a string (got {value!r})")
        if not self.username or not self.password:
            raise ConfigError("credentials.username and credentials.password must not be empty")
        if not self.stack_version:
            raise ConfigError("stack.version must not be empty")
        if not self.network_name:
            raise ConfigError("stack.network must not be empty")
        if self.max_tries < 1:
            raise ConfigError(f"kibana.max_tries must be >= 1 (got {self.max_tries})")
        if self.retry_delay < 0:
            raise ConfigError(f"kibana.retry_delay must be >= 0 (got {self.retry_delay})")
        if self.request_timeout <= 0:
            raise ConfigError(f"kibana.request_timeout must be > 0 (got {self.request_timeout})")

    @property
    def auth(self) -> tuple[str, str]:
        return (self.username, self.password)

    @property
    def kibana_headers(self) -> dict[str, str]:
        """Headers Kibana requires on API calls."""
        return {
            'kbn-version': self.stack_version,
            'kbn-xsrf': XSRF_HEADER_VALUE,
            'Content-Type': 'application/json',
        }

    @property
    def elasticsearch_image(self) -> str:
        return image_for(ELASTICSEARCH_IMAGE, self.stack_version)

    @property
    def kibana_image(self) -> str:
        return image_for(KIBANA_IMAGE, self.stack_version)

    @property
    def agent_image(self) -> str:
        return image_for(ELASTIC_AGENT_IMAGE, self.stack_version)

    @property
    def images(self) -> list[str]:
        return [self.elasticsearch_image, self.kibana_image, self.agent_image]


# (section, key) -> StackConfig field
_TOML_FIELDS = {
    ('stack', 'version'): 'stack_version',
    ('stack', 'network'): 'network_name',
    ('credentials', 'username'): 'username',
    ('credentials', 'password'): 'password',
    ('elasticsearch', 'url'): 'elasticsearch_url',
    ('elasticsearch', 'local_url'): 'local_es_url',
    ('kibana', 'url'): 'kibana_url',
    ('kibana', 'local_url'): 'local_kbn_url',
    ('kibana', 'config_file'): 'kibana_config',
    ('kibana', 'max_tries'): 'max_tries',
    ('kibana', 'retry_delay'): 'retry_delay',
    ('kibana', 'request_timeout'): 'request_timeout',
    ('fleet', 'url'): 'fleet_url',
}

_ENV_FIELDS = {
    'ELASTIC_USERNAME': 'username',
    'ELASTIC_PASSWORD': 'password',
    'STACK_VERSION': 'stack_version',
}

_NUMERIC_FIELDS = {'max_tries': int, 'retry_delay': float, 'request_timeout': float}


def parse_config_file(path: Path) -> dict[str, Any]:
    """
    Read a TOML config file into StackConfig keyword arguments.

    Raises:
        ConfigError: If the file is missing or not valid TOML
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    values: dict[str, Any] = {}
    for (section, key), field_name in _TOML_FIELDS.items():
        section_data = data.get(section, {})
        if not isinstance(section_data, dict) or key not in section_data:
            continue
        values[field_name] = section_data[key]

    if 'kibana_config' in values:
        if not isinstance(values['kibana_config'], str):
            raise ConfigError(f"kibana.config_file must be a string (got {values['kibana_config']!r})")
        kibana_config = Path(values['kibana_config'])
        if not kibana_config.is_absolute():
            kibana_config = path.parent / kibana_config
        values['kibana_config'] = kibana_config

    logger.debug(f"Loaded {len(values)} setting(s) from {path}")
    return values


def _coerce_numbers(values: dict[str, Any]) -> dict[str, Any]:
    for field_name, convert in _NUMERIC_FIELDS.items():
        if field_name not in values:
            continue
        raw = values[field_name]
        if isinstance(raw, bool):
            raise ConfigError(f"{field_name} must be a number (got {raw!r})")
        try:
            values[field_name] = convert(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{field_name} must be a number (got {raw!r})") from e
    return values


def load_config(
    path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> StackConfig:
    """
    Build the StackConfig for this invocation.

    Args:
        path: Explicit config file; must exist when given
        env: Environment mapping (default: os.environ)
        cwd: Directory searched for elastic-container.toml (default: Path.cwd())

    Returns:
        Frozen StackConfig
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    if path is None:
        candidate = (cwd or Path.cwd()) / CONFIG_FILENAME
        if candidate.exists():
            path = candidate

    if path is not None:
        values.update(parse_config_file(Path(path)))

    for env_name, field_name in _ENV_FIELDS.items():
        value = env.get(env_name)
        if value:
            logger.debug(f"Override from environment: {env_name}")
            values[field_name] = value

    return StackConfig(**_coerce_numbers(values))
