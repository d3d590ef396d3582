from __future__ import annotations

import pytest
import requests

from gareport.api import config as config_module
from gareport.api import transport as transport_module
from gareport.api.services.query_builder import DataRequest
from gareport.api.transport import HttpTransport


class DummyResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class DummySession:
    def __init__(self, response: DummyResponse):
        self.headers = {}
        self.calls = []
        self._response = response

    def get(self, url, params=None, timeout=None):
        self.calls.append(("GET", url, params, timeout))
        return self._response

    def post(self, url, json=None, timeout=None):
        self.calls.append(("POST", url, json, timeout))
        return self._response

    def close(self):
        pass


@pytest.fixture
def fresh_settings():
    config_module.get_settings.cache_clear()
    yield
    config_module.get_settings.cache_clear()


def test_settings_load_yaml_with_env_interpolation(tmp_path, monkeypatch, fresh_settings):
    config_path = tmp_path / "config.yml"
    config_path.write_text(
        "analytics:\n"
        "  access_token: ${GA_TOKEN}\n"
        "  default_max_results: 500\n"
        "jobs:\n"
        "  backend: redis\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("CONFIG_PATH", str(config_path))
    monkeypatch.setenv("GA_TOKEN", "secret-token")

    settings = config_module.get_settings()

    assert settings.analytics.access_token == "secret-token"
    assert settings.analytics.default_max_results == 500
    assert settings.jobs.backend == "redis"
    assert settings.cache.ttl_seconds == 300


def test_missing_config_file_uses_defaults(tmp_path, monkeypatch, fresh_settings):
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "absent.yml"))

    settings = config_module.reload_settings()

    assert settings.analytics.base_url == "https://www.googleapis.com/analytics/v3"
    assert settings.analytics.access_token is None


def test_http_transport_sends_page_request():
    session = DummySession(DummyResponse({"totalResults": 0}))
    transport = HttpTransport(
        "https://analytics.example/v3/", access_token="tok", timeout_seconds=5, session=session
    )
    request = DataRequest(
        view_id="ga:1234",
        start_date="2023-01-01",
        end_date="2023-01-31",
        metrics="ga:sessions",
        max_results=10,
        start_index=11,
    )

    assert transport.get_data(request) == {"totalResults": 0}

    method, url, params, timeout = session.calls[0]
    assert (method, url, timeout) == ("GET", "https://analytics.example/v3/data/ga", 5)
    assert params["start-index"] == 11
    assert session.headers["Authorization"] == "Bearer tok"


def test_http_transport_raises_on_http_errors():
    session = DummySession(DummyResponse({"error": "forbidden"}, status_code=403))
    transport = HttpTransport("https://analytics.example/v3", session=session)

    with pytest.raises(requests.HTTPError):
        transport.get_unsampled_report("111", "UA-111-1", "222", "report-1")

    _, url, _, _ = session.calls[0]
    assert url == (
        "https://analytics.example/v3/management/accounts/111/webproperties/UA-111-1"
        "/profiles/222/unsampledReports/report-1"
    )


def test_get_transport_requires_token(monkeypatch, settings):
    monkeypatch.setattr(transport_module, "get_settings", lambda: settings)
    with pytest.raises(ValueError):
        transport_module.get_transport()


def test_get_transport_is_cached_per_credentials(monkeypatch, settings):
    monkeypatch.setattr(transport_module, "get_settings", lambda: settings)
    try:
        first = transport_module.get_transport(access_token="tok")
        second = transport_module.get_transport(access_token="tok")
        assert first is second
    finally:
        transport_module.clear_transports()
