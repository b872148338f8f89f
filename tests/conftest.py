"""
Pytest configuration and shared fixtures for buildwatch tests.

This module provides reusable fixtures and response bodies used across
the test suite.
"""

from __future__ import annotations

import json
from typing import Any

import pytest

from buildwatch.api.client import DistributionApi
from buildwatch.logging import SilentLogger, set_global_logger

API_BASE = "https://api.test"

COMMIT = "36a72cad3098a513375068008d3720d3aebc2d82"
SHA256 = "58275a88331dc21c857be49fd7a9d70ba04843253e73e8a7424160b34529e04a"


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Keep BUILDWATCH_* variables, stray .env files and the global logger
    from leaking between tests.
    """
    monkeypatch.setattr(
        "buildwatch.config.loader.load_dotenv", lambda *args, **kwargs: False
    )
    for name in (
        "BUILDWATCH_API_BASE",
        "BUILDWATCH_PROJECT",
        "BUILDWATCH_VERSIONS",
        "BUILDWATCH_USER_AGENT",
        "BUILDWATCH_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def api() -> DistributionApi:
    """Provide a client for the 'paper' project on the fake API."""
    client = DistributionApi(API_BASE, "paper")
    yield client
    client.close()


@pytest.fixture
def project_json() -> dict[str, Any]:
    """Provide a project response body."""
    return {
        "project_id": "paper",
        "project_name": "Paper",
        "version_groups": ["1.16", "1.17"],
        "versions": ["1.16.3", "1.16.4", "1.16.5", "1.17.0"],
    }


@pytest.fixture
def build_json() -> dict[str, Any]:
    """Provide the response body of build 466 of 1.16.5."""
    return {
        "project_id": "paper",
        "project_name": "Paper",
        "version": "1.16.5",
        "build": 466,
        "time": "2021-02-08T10:22:13.662Z",
        "changes": [
            {
                "commit": COMMIT,
                "summary": "ChangeSummary",
                "message": "ChangeMessage",
            }
        ],
        "downloads": {
            "application": {
                "name": "paper-1.16.5-466.jar",
                "sha256": SHA256,
            }
        },
    }


@pytest.fixture
def version_body():
    """
    Factory fixture for version response bodies.

    Usage:
        m.get(VERSION_URL, text=version_body(5, 6))
    """

    def _create(*builds: int) -> str:
        return json.dumps(
            {
                "project_id": "paper",
                "project_name": "Paper",
                "version": "1.16.5",
                "builds": list(builds),
            }
        )

    return _create
