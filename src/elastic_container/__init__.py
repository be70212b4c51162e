"""elastic-container package."""

from __future__ import annotations

import os


def _build_version() -> str:
	override = os.getenv("ELASTIC_CONTAINER_BUILD_VERSION")
	if override:
		return override
	return "0.3.0"


__version__ = _build_version()
