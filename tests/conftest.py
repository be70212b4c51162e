"""
Shared fixtures: fake Kibana HTTP session.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


def make_response(status_code: int = 200, body=None) -> Mock:
    response = Mock()
    response.status_code = status_code
    if isinstance(body, (dict, list)):
        response.text = json.dumps(body)
        response.json.return_value = body
    else:
        response.text = body or ""
        response.json.side_effect = ValueError("Expecting value")
    return response


class FakeKibanaSession:
    """Stands in for requests.Session; records every call."""

    def __init__(self, probe_statuses, enable_body=None, install_status=200):
        self.head = Mock(side_effect=[
            status if isinstance(status, BaseException) else make_response(status)
            for status in probe_statuses
        ])
        self.enable_response = make_response(
            200, {"acknowledged": True} if enable_body is None else enable_body
        )
        self.install_response = make_response(install_status, {"installed": 0})
        self.request = Mock(side_effect=self._request)
        self.close = Mock()

    def _request(self, method, url, **kwargs):
        if method == "POST":
            return self.enable_response
        if method == "PUT":
            return self.install_response
        raise AssertionError(f"unexpected {method} {url}")

    def methods(self) -> list[str]:
        return [call.args[0] for call in self.request.call_args_list]


@pytest.fixture
def fake_session():
    return FakeKibanaSession


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("ELASTIC_USERNAME", "ELASTIC_PASSWORD", "STACK_VERSION"):
        monkeypatch.delenv(name, raising=False)
