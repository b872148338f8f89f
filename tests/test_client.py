"""
Tests for buildwatch.api.client module.

Tests the distribution API client including:
- Request URLs and headers
- Response decoding into records
- Error mapping (transport, body read, schema, URL construction)
- Session ownership
"""

from __future__ import annotations

import json
from unittest.mock import PropertyMock, patch

import pytest
import requests
import requests_mock

from buildwatch.api.client import DEFAULT_USER_AGENT, DistributionApi
from buildwatch.api.models import Build, Project, Version
from buildwatch.exceptions import (
    BodyReadError,
    ConfigError,
    NetworkError,
    NoBuildsError,
    SchemaMismatchError,
    TransportError,
    UrlConstructionError,
)

API_BASE = "https://api.test"
PROJECT_URL = f"{API_BASE}/v2/projects/paper"
VERSION_URL = f"{PROJECT_URL}/versions/1.16.5"
BUILD_URL = f"{VERSION_URL}/builds/466"


class TestConstruction:
    """Tests for DistributionApi construction."""

    def test_strips_trailing_slash(self):
        """Test that a trailing slash on the API base is ignored."""
        api = DistributionApi(f"{API_BASE}/", "paper")

        assert api.api_base == API_BASE

    def test_empty_project_raises(self):
        """Test that an empty project is a configuration error."""
        with pytest.raises(ConfigError, match="non-empty project"):
            DistributionApi(API_BASE, "")

    def test_non_positive_timeout_raises(self):
        """Test that a zero timeout is rejected."""
        with pytest.raises(ConfigError, match="Timeout must be positive"):
            DistributionApi(API_BASE, "paper", timeout=0)

    @pytest.mark.parametrize("timeout", [float("nan"), float("inf"), True])
    def test_non_finite_or_bool_timeout_raises(self, timeout):
        """Test that NaN, infinite and boolean timeouts are rejected."""
        with pytest.raises(ConfigError, match="Timeout must be positive and finite"):
            DistributionApi(API_BASE, "paper", timeout=timeout)

    def test_close_leaves_injected_session_open(self):
        """Test that an injected session is not closed by the client."""
        session = requests.Session()

        with patch.object(session, "close") as mock_close:
            with DistributionApi(API_BASE, "paper", session=session):
                pass

        mock_close.assert_not_called()

    def test_close_closes_owned_session(self):
        """Test that the client closes a session it created."""
        api = DistributionApi(API_BASE, "paper")

        with patch.object(api.session, "close") as mock_close:
            api.close()

        mock_close.assert_called_once()


class TestFetching:
    """Tests for successful fetches."""

    def test_fetch_project(self, api, project_json):
        """Test fetching and decoding the project record."""
        with requests_mock.Mocker() as m:
            m.get(PROJECT_URL, json=project_json)

            project = api.fetch_project()

        assert project == Project(
            version_groups=("1.16", "1.17"),
            versions=("1.16.3", "1.16.4", "1.16.5", "1.17.0"),
            project_id="paper",
            project_name="Paper",
        )

    def test_fetch_version(self, api, version_body):
        """Test fetching and decoding a version record."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text=version_body(463, 464, 465, 466))

            version = api.fetch_version("1.16.5")

        assert version == Version(builds=(463, 464, 465, 466), version="1.16.5")

    def test_fetch_build(self, api, build_json):
        """Test fetching and decoding a build record."""
        with requests_mock.Mocker() as m:
            m.get(BUILD_URL, json=build_json)

            build = api.fetch_build("1.16.5", 466)

        assert build == Build.from_json(build_json)
        assert build.downloads["application"].name == "paper-1.16.5-466.jar"

    def test_request_headers(self, api, version_body):
        """Test that requests accept JSON and identify the client."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text=version_body(1))

            api.fetch_version("1.16.5")

            headers = m.last_request.headers
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == DEFAULT_USER_AGENT

    def test_custom_user_agent(self, version_body):
        """Test that a configured user agent is sent."""
        api = DistributionApi(API_BASE, "paper", user_agent="my-bot/1.0")

        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text=version_body(1))

            api.fetch_version("1.16.5")

            assert m.last_request.headers["User-Agent"] == "my-bot/1.0"

    def test_version_label_is_percent_encoded(self, api, version_body):
        """Test that a slash in a version label stays inside one segment."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/a%2Fb", text=version_body(1))

            api.fetch_version("a/b")

            assert m.called_once

    def test_fetch_latest_build(self, api, version_body, build_json):
        """Test that the newest listed build is fetched."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text=version_body(464, 465, 466))
            m.get(BUILD_URL, json=build_json)

            build = api.fetch_latest_build("1.16.5")

            assert m.call_count == 2
        assert build.build == 466

    def test_fetch_latest_build_no_builds(self, api, version_body):
        """Test that a version without builds raises NoBuildsError."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text=version_body())

            with pytest.raises(NoBuildsError, match="No builds for version '1.16.5'"):
                api.fetch_latest_build("1.16.5")

            assert m.call_count == 1


class TestErrors:
    """Tests for error mapping."""

    def test_not_found_is_transport_error(self, api):
        """Test that an unknown version surfaces as a 404 TransportError."""
        with requests_mock.Mocker() as m:
            m.get(f"{PROJECT_URL}/versions/9.9.9", status_code=404, reason="Not Found")

            with pytest.raises(TransportError, match="404") as exc_info:
                api.fetch_version("9.9.9")

        assert exc_info.value.status_code == 404
        assert exc_info.value.retryable is True

    def test_server_error_is_transport_error(self, api):
        """Test that 5xx statuses are transport errors."""
        with requests_mock.Mocker() as m:
            m.get(PROJECT_URL, status_code=503)

            with pytest.raises(TransportError) as exc_info:
                api.fetch_project()

        assert exc_info.value.status_code == 503

    def test_connection_error(self, api):
        """Test that connection failures are transport errors without status."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, exc=requests.exceptions.ConnectionError("refused"))

            with pytest.raises(TransportError, match="failed") as exc_info:
                api.fetch_version("1.16.5")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_timeout(self, api):
        """Test that timeouts are transport errors."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, exc=requests.exceptions.ReadTimeout)

            with pytest.raises(TransportError, match="timed out"):
                api.fetch_version("1.16.5")

    def test_body_read_failure(self, api):
        """Test that a broken body stream raises BodyReadError."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text="{}")

            with patch.object(
                requests.Response,
                "content",
                new_callable=PropertyMock,
                side_effect=requests.exceptions.ChunkedEncodingError("broken"),
            ):
                with pytest.raises(BodyReadError, match="Could not read"):
                    api.fetch_version("1.16.5")

    def test_invalid_json(self, api):
        """Test that a non-JSON body is a schema mismatch with an excerpt."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text="<html>maintenance</html>")

            with pytest.raises(SchemaMismatchError, match="Invalid JSON") as exc_info:
                api.fetch_version("1.16.5")

        assert exc_info.value.body == "<html>maintenance</html>"
        assert exc_info.value.retryable is False

    def test_wrong_shape(self, api):
        """Test that valid JSON of the wrong shape is a schema mismatch."""
        with requests_mock.Mocker() as m:
            m.get(VERSION_URL, text=json.dumps({"version": "1.16.5"}))

            with pytest.raises(SchemaMismatchError, match="missing field 'builds'"):
                api.fetch_version("1.16.5")

    def test_relative_api_base(self):
        """Test that an API base without scheme cannot build URLs."""
        api = DistributionApi("papermc.io/api", "paper")

        with pytest.raises(UrlConstructionError, match="absolute http") as exc_info:
            api.fetch_project()

        assert exc_info.value.url == "papermc.io/api/v2/projects/paper"
        assert isinstance(exc_info.value, ConfigError)

    def test_empty_version_label(self, api):
        """Test that an empty version label is rejected before any request."""
        with requests_mock.Mocker() as m:
            with pytest.raises(UrlConstructionError, match="Empty path segment"):
                api.fetch_version("")

            assert not m.called

    def test_network_errors_share_base(self, api):
        """Test that transport errors can be caught as NetworkError."""
        with requests_mock.Mocker() as m:
            m.get(PROJECT_URL, status_code=500)

            with pytest.raises(NetworkError):
                api.fetch_project()
