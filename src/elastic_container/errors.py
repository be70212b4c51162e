#!/usr/bin/env python3
"""Exception types raised by elastic-container."""

from __future__ import annotations


class ElasticContainerError(Exception):
    """Base error. ``exit_code`` is what the CLI returns when it surfaces."""

    exit_code = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(ElasticContainerError, ValueError):
    """Invalid or unreadable configuration."""


class DockerUnavailable(ElasticContainerError):
    """The docker CLI is missing or not working."""


class DetectionSetupError(ElasticContainerError):
    """Enabling the Detection Engine failed."""


class ReadinessTimeout(DetectionSetupError):
    """Kibana never answered with the ready status within the attempt budget."""

    def __init__(self, max_tries: int, last_status: int | None = None) -> None:
        super().__init__(f"Exceeded MAXTRIES ({max_tries}) to setup detection engine.")
        self.max_tries = max_tries
        self.last_status = last_status


class FeatureEnableRejected(DetectionSetupError):
    """The enable call completed but Kibana did not acknowledge it."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Detection Engine setup failed :-( (HTTP {status_code})")
        self.status_code = status_code
        self.body = body


class TransportFailure(DetectionSetupError):
    """A request to Kibana could not complete (connection refused, timeout, ...)."""

    def __init__(self, method: str, url: str, reason: str) -> None:
        super().__init__(f"{method} {url} failed: {reason}")
        self.method = method
        self.url = url
        self.reason = reason
