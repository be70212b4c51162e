#!/usr/bin/env python3
"""
Container definitions for Elasticsearch, Kibana and the Fleet Server agent.

Kibana reads ``kibana.yml`` from a bind mount. When the user does not
provide one it is rendered from the packaged Jinja2 template into the
current directory.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from . import console
from .config import StackConfig
from .config_constants import (
    ELASTICSEARCH_CONTAINER,
    ELASTICSEARCH_PORTS,
    FLEET_SERVER_CONTAINER,
    FLEET_SERVER_PORT,
    KIBANA_CONFIG_FILENAME,
    KIBANA_CONFIG_MOUNT,
    KIBANA_CONFIG_TEMPLATE,
    KIBANA_CONTAINER,
    KIBANA_PORT,
)
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContainerSpec:
    name: str
    image: str
    ports: tuple[int, ...] = ()
    env: tuple[tuple[str, str], ...] = ()
    volumes: tuple[tuple[str, str], ...] = ()

    def run_args(self, network_name: str) -> list[str]:
        """Arguments for ``docker run`` (detached, removed on stop)."""
        args = ['-d', '--network', network_name, '--rm', '--name', self.name]
        for port in self.ports:
            args += ['-p', f'{port}:{port}']
        for host_path, container_path in self.volumes:
            args += ['-v', f'{host_path}:{container_path}']
        for key, value in self.env:
            args += ['-e', f'{key}={value}']
        args.append(self.image)
        return args


def elasticsearch_spec(config: StackConfig) -> ContainerSpec:
    return ContainerSpec(
        name=ELASTICSEARCH_CONTAINER,
        image=config.elasticsearch_image,
        ports=ELASTICSEARCH_PORTS,
        env=tuple({
            'discovery.type': 'single-node',
            'xpack.security.enabled': 'true',
            'xpack.security.authc.api_key.enabled': 'true',
            'ELASTIC_PASSWORD': config.password,
        }.items()),
    )


def kibana_spec(config: StackConfig, kibana_config: Path) -> ContainerSpec:
    return ContainerSpec(
        name=KIBANA_CONTAINER,
        image=config.kibana_image,
        ports=(KIBANA_PORT,),
        env=tuple({
            'ELASTICSEARCH_HOSTS': config.elasticsearch_url,
            'ELASTICSEARCH_USERNAME': config.username,
            'ELASTICSEARCH_PASSWORD': config.password,
        }.items()),
        volumes=((str(kibana_config.resolve()), KIBANA_CONFIG_MOUNT),),
    )


def fleet_server_spec(config: StackConfig) -> ContainerSpec:
    return ContainerSpec(
        name=FLEET_SERVER_CONTAINER,
        image=config.agent_image,
        ports=(FLEET_SERVER_PORT,),
        env=tuple({
            'KIBANA_HOST': config.kibana_url,
            'KIBANA_USERNAME': config.username,
            'KIBANA_PASSWORD': config.password,
            'ELASTICSEARCH_HOSTS': config.elasticsearch_url,
            'ELASTICSEARCH_USERNAME': config.username,
            'ELASTICSEARCH_PASSWORD': config.password,
            'KIBANA_FLEET_SETUP': '1',
            'FLEET_ENROLL': '1',
            'FLEET_SERVER_INSECURE_HTTP': '1',
            'FLEET_SERVER_ENABLE': 'true',
            'FLEET_SERVER_ELASTICSEARCH_HOST': config.elasticsearch_url,
            'FLEET_URL': config.fleet_url,
        }.items()),
    )


def build_stack(config: StackConfig, kibana_config: Path) -> list[ContainerSpec]:
    """Container specs in start order."""
    return [
        elasticsearch_spec(config),
        kibana_spec(config, kibana_config),
        fleet_server_spec(config),
    ]


def render_kibana_config(config: StackConfig, encryption_key: Optional[str] = None) -> str:
    """Render kibana.yml from the packaged template."""
    env = Environment(
        loader=PackageLoader('elastic_container', 'templates'),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    context = {
        'elasticsearch_url': config.elasticsearch_url,
        'fleet_url': config.fleet_url,
        'stack_version': config.stack_version,
        # Kibana rejects keys shorter than 32 characters
        'encryption_key': encryption_key or secrets.token_hex(16),
    }
    logger.debug(f"Rendering {KIBANA_CONFIG_TEMPLATE}")
    try:
        return env.get_template(KIBANA_CONFIG_TEMPLATE).render(**context)
    except TemplateError as e:
        raise ConfigError(f"Failed to render {KIBANA_CONFIG_TEMPLATE}: {e}") from e


def resolve_kibana_config(config: StackConfig, workdir: Optional[Path] = None) -> Path:
    """
    Find or create the kibana.yml to mount into the Kibana container.

    Order:
        1. config.kibana_config (must exist)
        2. <workdir>/kibana.yml if present
        3. Render the packaged template into <workdir>/kibana.yml

    Raises:
        ConfigError: If an explicitly configured file does not exist
    """
    if config.kibana_config is not None:
        if not config.kibana_config.is_file():
            raise ConfigError(f"Kibana config file not found: {config.kibana_config}")
        return config.kibana_config

    workdir = workdir or Path.cwd()
    target = workdir / KIBANA_CONFIG_FILENAME
    if target.is_file():
        logger.debug(f"Using existing {target}")
        return target

    target.write_text(render_kibana_config(config), encoding='utf-8')
    console.info(f"Rendered {target}")
    return target
