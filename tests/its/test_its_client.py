from unittest.mock import MagicMock, patch

import pytest
import requests

from commitgate.its.client import (
    ItsDependencyTimeout,
    ItsDependencyUnavailable,
    RestItsClient,
)
from commitgate.its.factory import ItsFacadeFactory


def _response(status_code):
    resp = MagicMock()
    resp.status_code = status_code
    return resp


def _client():
    return RestItsClient(base_url="https://its.example.com/", auth=("bot", "secret"), timeout_seconds=3)


def test_exists_true_on_200():
    with patch("commitgate.its.client.requests.request", return_value=_response(200)) as request:
        assert _client().exists("WEB-1") is True

    args, kwargs = request.call_args
    assert args == ("GET", "https://its.example.com/rest/api/2/issue/WEB-1")
    assert kwargs["params"] == {"fields": "key"}
    assert kwargs["timeout"] == 3
    assert kwargs["auth"] == ("bot", "secret")


def test_exists_false_on_404():
    with patch("commitgate.its.client.requests.request", return_value=_response(404)):
        assert _client().exists("WEB-404") is False


def test_exists_raises_on_unexpected_status():
    with patch("commitgate.its.client.requests.request", return_value=_response(503)):
        with pytest.raises(ItsDependencyUnavailable):
            _client().exists("WEB-1")


def test_timeout_is_mapped():
    with patch("commitgate.its.client.requests.request", side_effect=requests.Timeout("slow")):
        with pytest.raises(ItsDependencyTimeout):
            _client().exists("WEB-1")


def test_connection_error_is_mapped():
    with patch("commitgate.its.client.requests.request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ItsDependencyUnavailable) as excinfo:
            _client().exists("WEB-1")
    assert "refused" in str(excinfo.value)


def test_missing_base_url_is_unavailable(monkeypatch):
    monkeypatch.delenv("COMMITGATE_ITS_BASE_URL", raising=False)
    with patch("commitgate.its.client.requests.request") as request:
        with pytest.raises(ItsDependencyUnavailable):
            RestItsClient().exists("WEB-1")
    request.assert_not_called()


def test_client_reads_environment(monkeypatch):
    monkeypatch.setenv("COMMITGATE_ITS_BASE_URL", "https://tracker.internal/")
    monkeypatch.setenv("COMMITGATE_ITS_USER", "bot")
    monkeypatch.setenv("COMMITGATE_ITS_TOKEN", "token")
    monkeypatch.setenv("COMMITGATE_ITS_TIMEOUT_SECONDS", "2.5")

    client = RestItsClient()
    assert client.base_url == "https://tracker.internal"
    assert client.auth == ("bot", "token")
    assert client.default_timeout_seconds == 2.5


def test_check_permissions():
    with patch("commitgate.its.client.requests.request", return_value=_response(200)):
        assert _client().check_permissions() is True
    with patch("commitgate.its.client.requests.request", side_effect=requests.ConnectionError("down")):
        assert _client().check_permissions() is False
    assert RestItsClient(base_url="").check_permissions() is False


def test_factory_builds_fresh_rest_client_per_call():
    factory = ItsFacadeFactory()
    first = factory.get_facade("platform/api")
    second = factory.get_facade("platform/api")
    assert isinstance(first, RestItsClient)
    assert first is not second


def test_exists_quotes_issue_id_in_path():
    with patch("commitgate.its.client.requests.request", return_value=_response(404)) as request:
        assert _client().exists("#42") is False
    args, _ = request.call_args
    assert args == ("GET", "https://its.example.com/rest/api/2/issue/%2342")

    with patch("commitgate.its.client.requests.request", return_value=_response(200)) as request:
        _client().exists("ops/7?x")
    args, _ = request.call_args
    assert args[1] == "https://its.example.com/rest/api/2/issue/ops%2F7%3Fx"
