"""Tests for gocov_report/client.py"""

import warnings

import pytest
import requests_mock as req_mock

from gocov_report.client import (
    AuthenticationError,
    CoverageClient,
    CoverageClientError,
    NetworkError,
    NotFoundError,
)
from gocov_report.models import ModelError, Package

BASE = "https://coverage.example.com"
ENDPOINT = "/artifacts/api/coverage.json"


@pytest.fixture
def client() -> CoverageClient:
    return CoverageClient(url=BASE, token="tok_test")


def _document(*names: str) -> dict:
    return {"Packages": [{"Name": name, "Functions": []} for name in names]}


# ---------------------------------------------------------------------------
# get_json() - happy path
# ---------------------------------------------------------------------------

def test_get_json_returns_parsed_json(client, requests_mock):
    requests_mock.get(f"{BASE}{ENDPOINT}", json=_document("a"))
    assert client.get_json(ENDPOINT) == _document("a")


def test_get_json_sends_bearer_token(client, requests_mock):
    adapter = requests_mock.get(f"{BASE}{ENDPOINT}", json={})
    client.get_json(ENDPOINT)
    assert adapter.last_request.headers.get("Authorization") == "Bearer tok_test"


def test_no_token_sends_no_auth_header(requests_mock):
    adapter = requests_mock.get(f"{BASE}{ENDPOINT}", json={})
    CoverageClient(url=BASE).get_json(ENDPOINT)
    assert "Authorization" not in adapter.last_request.headers


def test_trailing_slash_and_relative_endpoint(requests_mock):
    requests_mock.get(f"{BASE}{ENDPOINT}", json={})
    client = CoverageClient(url=BASE + "/")
    assert client.get_json(ENDPOINT.lstrip("/")) == {}


# ---------------------------------------------------------------------------
# get_json() - HTTP error codes
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("status", [401, 403])
def test_auth_failures_raise_authentication_error(client, requests_mock, status):
    requests_mock.get(f"{BASE}{ENDPOINT}", status_code=status)
    with pytest.raises(AuthenticationError):
        client.get_json(ENDPOINT)


def test_404_raises_not_found_error(client, requests_mock):
    requests_mock.get(f"{BASE}{ENDPOINT}", status_code=404)
    with pytest.raises(NotFoundError):
        client.get_json(ENDPOINT)


def test_500_raises_client_error(client, requests_mock):
    requests_mock.get(f"{BASE}{ENDPOINT}", status_code=500, text="Internal Server Error")
    with pytest.raises(CoverageClientError, match="500"):
        client.get_json(ENDPOINT)


def test_non_json_body_raises_client_error(client, requests_mock):
    requests_mock.get(f"{BASE}{ENDPOINT}", text="<html>oops</html>")
    with pytest.raises(CoverageClientError, match="not valid JSON"):
        client.get_json(ENDPOINT)


# ---------------------------------------------------------------------------
# get_json() - network errors
# ---------------------------------------------------------------------------

def test_timeout_raises_network_error(client, requests_mock):
    import requests
    requests_mock.get(f"{BASE}{ENDPOINT}", exc=requests.exceptions.Timeout)
    with pytest.raises(NetworkError, match="timed out"):
        client.get_json(ENDPOINT)


def test_connection_error_raises_network_error(client, requests_mock):
    import requests
    requests_mock.get(f"{BASE}{ENDPOINT}", exc=requests.exceptions.ConnectionError)
    with pytest.raises(NetworkError, match="Unable to reach"):
        client.get_json(ENDPOINT)


# ---------------------------------------------------------------------------
# get_packages()
# ---------------------------------------------------------------------------

def test_get_packages_parses_document(client):
    with req_mock.Mocker() as m:
        m.get(f"{BASE}{ENDPOINT}", json=_document("b", "a"))
        packages = client.get_packages(ENDPOINT)
    assert packages == [Package("b"), Package("a")]


def test_get_packages_invalid_document(client):
    with req_mock.Mocker() as m:
        m.get(f"{BASE}{ENDPOINT}", json={"Packages": [{"Functions": []}]})
        with pytest.raises(ModelError, match=ENDPOINT):
            client.get_packages(ENDPOINT)


def test_get_packages_warns_when_empty(client):
    with req_mock.Mocker() as m:
        m.get(f"{BASE}{ENDPOINT}", json={"Packages": []})
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            packages = client.get_packages(ENDPOINT)

    assert packages == []
    assert any("no packages" in str(w.message) for w in caught)
