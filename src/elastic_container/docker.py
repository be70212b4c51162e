#!/usr/bin/env python3
"""
Wrapper around the docker CLI.

Docker failures do not abort an action: ``docker network create`` fails
when the network already exists, ``docker stop`` fails when the container is
already gone. Non-zero exits are reported as warnings and the action goes on.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from typing import Iterable

from . import console
from .errors import DockerUnavailable

logger = logging.getLogger(__name__)

DOCKER = 'docker'


def check_docker_available() -> str:
    """
    Validate that the docker CLI is installed and working.

    Returns:
        The ``docker --version`` output

    Raises:
        DockerUnavailable: If docker is missing, hangs or exits non-zero
    """
    try:
        result = subprocess.run(
            [DOCKER, '--version'],
            capture_output=True,
            text=True,
            timeout=10
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        raise DockerUnavailable(
            f"Docker Engine not available ({e}). Install: https://docs.docker.com/engine/install/"
        ) from e

    if result.returncode != 0:
        raise DockerUnavailable(f"'docker --version' failed: {result.stderr.strip()}")

    version = result.stdout.strip()
    logger.debug(version)
    return version


def run_docker(
    args: Iterable[str],
    verbose: bool = False,
    stream: bool = False,
    echo_stdout: bool = False,
) -> subprocess.CompletedProcess:
    """
    Run ``docker <args>``.

    Args:
        args: Arguments after ``docker``
        verbose: Echo captured stdout/stderr to stderr
        stream: Leave stdout/stderr attached to the terminal
        echo_stdout: Print captured stdout to stdout even when not verbose

    Returns:
        The CompletedProcess, whatever its exit code
    """
    cmd = [DOCKER, *args]
    logger.debug(f"Running: {' '.join(cmd)}")

    if stream:
        result = subprocess.run(cmd)
    else:
        result = subprocess.run(cmd, capture_output=True, text=True)
        if echo_stdout and result.stdout:
            print(result.stdout.rstrip(), flush=True)
        if verbose:
            outputs = (result.stderr,) if echo_stdout else (result.stdout, result.stderr)
            for output in outputs:
                if output:
                    print(output.rstrip(), file=sys.stderr, flush=True)

    if result.returncode != 0:
        if verbose or stream:
            console.warn(f"Command failed with exit code {result.returncode}: {' '.join(cmd)}")
        else:
            logger.debug(f"Command failed with exit code {result.returncode}: {' '.join(cmd)}")
    return result


def pull_image(image: str) -> subprocess.CompletedProcess:
    return run_docker(['pull', image], stream=True)


def create_network(network_name: str, verbose: bool = False) -> subprocess.CompletedProcess:
    return run_docker(['network', 'create', network_name], verbose=verbose)


def remove_network(network_name: str, verbose: bool = False) -> subprocess.CompletedProcess:
    return run_docker(['network', 'rm', network_name], verbose=verbose)


def run_container(run_args: list[str], verbose: bool = False) -> subprocess.CompletedProcess:
    """Start a detached container from a prepared ``docker run`` argument list."""
    return run_docker(['run', *run_args], verbose=verbose)


def stop_container(name: str, verbose: bool = False) -> subprocess.CompletedProcess:
    return run_docker(['stop', name], verbose=verbose, echo_stdout=True)


def restart_container(name: str, verbose: bool = False) -> subprocess.CompletedProcess:
    return run_docker(['restart', name], verbose=verbose, echo_stdout=True)


def container_status(names: Iterable[str]) -> subprocess.CompletedProcess:
    """Print a ``NAMES: STATUS`` table for containers matching any of ``names``."""
    args = ['ps']
    for name in names:
        args += ['-f', f'name={name}']
    args += ['--format', 'table {{.Names}}: {{.Status}}']
    return run_docker(args, stream=True)
