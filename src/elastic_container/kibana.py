#!/usr/bin/env python3
"""
Kibana API client and Detection Engine setup.

Kibana takes a while to come up after its container starts. Setup polls the
root URL until Kibana answers with a redirect to its login page, then:

1. POST /api/detection_engine/index   (must be acknowledged, never retried)
2. PUT  /api/detection_engine/rules/prepackaged   (best effort, not gating)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from . import console
from .config import StackConfig
from .config_constants import (
    DETECTION_ENGINE_INDEX_PATH,
    PREPACKAGED_RULES_PATH,
    READY_STATUS_CODE,
)
from .errors import FeatureEnableRejected, ReadinessTimeout, TransportFailure

logger = logging.getLogger(__name__)


class KibanaClient:
    """Thin wrapper over a requests.Session for the calls we make to Kibana."""

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str],
        headers: dict[str, str],
        timeout: float,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.auth = auth
        self.headers = dict(headers)
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: StackConfig, session: Optional[requests.Session] = None) -> "KibanaClient":
        return cls(
            config.local_kbn_url,
            auth=config.auth,
            headers=config.kibana_headers,
            timeout=config.request_timeout,
            session=session,
        )

    def close(self) -> None:
        self.session.close()

    def probe(self) -> Optional[int]:
        """
        HEAD the root URL without following redirects.

        Returns:
            The HTTP status code, or None when Kibana is not reachable yet
        """
        url = f"{self.base_url}/"
        try:
            response = self.session.head(url, allow_redirects=False, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.debug(f"Probe {url} failed: {e}")
            return None
        logger.debug(f"Probe {url} -> HTTP {response.status_code}")
        return response.status_code

    def enable_detection_engine(self) -> dict:
        """
        Create the Detection Engine signals index.

        Returns:
            The decoded JSON response

        Raises:
            TransportFailure: If the request could not complete
            FeatureEnableRejected: If the response is not ``acknowledged: true``
        """
        response = self._request('POST', DETECTION_ENGINE_INDEX_PATH)
        logger.debug(f"Detection Engine enable -> HTTP {response.status_code}: {response.text}")

        try:
            payload = response.json()
        except ValueError:
            raise FeatureEnableRejected(response.status_code, response.text) from None

        if not isinstance(payload, dict) or payload.get('acknowledged') is not True:
            raise FeatureEnableRejected(response.status_code, response.text)
        return payload

    def install_prepackaged_rules(self) -> requests.Response:
        """Install the bundled detection rules. The response body is not checked."""
        response = self._request('PUT', PREPACKAGED_RULES_PATH)
        logger.debug(f"Prepackaged rules install -> HTTP {response.status_code}: {response.text}")
        return response

    def _request(self, method: str, path: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            return self.session.request(
                method,
                url,
                headers=self.headers,
                auth=self.auth,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportFailure(method, url, str(e)) from e


@dataclass
class SetupResult:
    attempts: int
    rules_installed: bool


class DetectionEngineSetup:
    """
    Wait for Kibana, enable the Detection Engine, install prebuilt rules.

    Args:
        client: KibanaClient pointed at the host-side Kibana URL
        max_tries: Probe attempts before giving up (>= 1)
        retry_delay: Seconds to sleep between probes
        sleep: Sleeper, injectable for tests
    """

    def __init__(
        self,
        client: KibanaClient,
        max_tries: int,
        retry_delay: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_tries < 1:
            raise ValueError(f"max_tries must be >= 1 (got {max_tries})")
        self.client = client
        self.max_tries = max_tries
        self.retry_delay = retry_delay
        self.sleep = sleep

    def wait_until_ready(self) -> int:
        """
        Poll Kibana until it answers with the ready status.

        Returns:
            Number of probes made

        Raises:
            ReadinessTimeout: If every attempt came back not ready
        """
        status = None
        for attempt in range(1, self.max_tries + 1):
            console.info("Attempting to enable the Detection Engine and Prebuilt-Detection Rules")
            status = self.client.probe()
            if status == READY_STATUS_CODE:
                console.info("Kibana is up. Proceeding")
                return attempt

            logger.debug(f"Attempt {attempt}/{self.max_tries}: status={status}")
            if attempt < self.max_tries:
                console.info(f"Kibana still loading. Trying again in {self.retry_delay:g} seconds")
                self.sleep(self.retry_delay)

        raise ReadinessTimeout(self.max_tries, last_status=status)

    def install_rules(self) -> bool:
        """Install prepackaged rules; failures are reported but never raised."""
        try:
            response = self.client.install_prepackaged_rules()
        except TransportFailure as e:
            console.warn(f"Installing prepackaged rules failed: {e.reason}")
            return False

        if response.status_code >= 400:
            console.warn(f"Installing prepackaged rules returned HTTP {response.status_code}")
            return False
        return True

    def run(self) -> SetupResult:
        attempts = self.wait_until_ready()

        self.client.enable_detection_engine()
        console.info("Detection engine enabled. Installing prepackaged rules.")

        installed = self.install_rules()
        if installed:
            console.success("Prebuilt Detections Enabled!")
        return SetupResult(attempts=attempts, rules_installed=installed)


def configure_detection_engine(
    config: StackConfig,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SetupResult:
    """Run Detection Engine setup against the Kibana described by ``config``."""
    client = KibanaClient.from_config(config, session=session)
    try:
        return DetectionEngineSetup(
            client,
            max_tries=config.max_tries,
            retry_delay=config.retry_delay,
            sleep=sleep,
        ).run()
    finally:
        client.close()
