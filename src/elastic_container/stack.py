#!/usr/bin/env python3
"""
Stack actions: stage, start, stop, restart, status.

Each action takes the resolved StackConfig and the verbose flag. Failures
that must end the run are raised as ElasticContainerError subclasses and
turned into exit codes by the CLI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from . import console, docker
from .config import StackConfig
from .config_constants import START_ORDER
from .kibana import SetupResult, configure_detection_engine
from .services import build_stack, resolve_kibana_config

logger = logging.getLogger(__name__)


def stage(config: StackConfig, verbose: bool = False) -> None:
    """Download the Elasticsearch, Kibana and Elastic Agent images without starting them."""
    for image in config.images:
        docker.pull_image(image)


def start(
    config: StackConfig,
    verbose: bool = False,
    workdir: Optional[Path] = None,
    configure: Callable[[StackConfig], SetupResult] = configure_detection_engine,
) -> SetupResult:
    """
    Create the network, start the three containers and configure Kibana.

    Args:
        config: Stack configuration
        verbose: Show docker output
        workdir: Where kibana.yml is looked up or rendered (default: cwd)
        configure: Detection Engine setup step, injectable for tests

    Raises:
        DetectionSetupError: If Kibana never became ready or rejected the setup
    """
    console.info("Starting Elastic Stack network and containers")

    kibana_config = resolve_kibana_config(config, workdir)

    docker.create_network(config.network_name, verbose=verbose)
    for spec in build_stack(config, kibana_config):
        logger.debug(f"Starting {spec.name} ({spec.image})")
        docker.run_container(spec.run_args(config.network_name), verbose=verbose)

    result = configure(config)

    console.info()
    console.info(f"Browse to {config.local_kbn_url}")
    console.info(f"Username: {config.username}")
    console.info(f"Passphrase: {config.password}")
    console.info()
    return result


def stop(config: StackConfig, verbose: bool = False) -> None:
    """Stop the containers (they are removed on stop) and remove the network."""
    console.info("#####")
    console.info("Stopping and removing all Elastic Stack components.")
    console.info("#####")
    for name in reversed(START_ORDER):
        docker.stop_container(name, verbose=verbose)
    docker.remove_network(config.network_name, verbose=verbose)


def restart(config: StackConfig, verbose: bool = False) -> None:
    console.info("#####")
    console.info("Restarting all Elastic Stack components.")
    console.info("#####")
    for name in START_ORDER:
        docker.restart_container(name, verbose=verbose)


def status(config: StackConfig, verbose: bool = False) -> None:
    docker.container_status(START_ORDER)


ACTIONS: dict[str, Callable[..., object]] = {
    'stage': stage,
    'start': start,
    'stop': stop,
    'restart': restart,
    'status': status,
}
