import pytest
import requests

from imagery import unsplash
from imagery.unsplash import UnsplashImageSearch
from mailcraft.errors import ImageSearchError, UpstreamFailure


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _patch_get(monkeypatch, response):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(unsplash.requests, "get", fake_get)
    return calls


def test_returns_first_regular_url(monkeypatch):
    calls = _patch_get(monkeypatch, FakeResponse({
        "results": [
            {"urls": {"regular": "https://images.unsplash.com/first"}},
            {"urls": {"regular": "https://images.unsplash.com/second"}},
        ]
    }))
    search = UnsplashImageSearch(access_key="key-123", base_url="https://api.unsplash.test")

    assert search.search("red shoes") == "https://images.unsplash.com/first"
    assert calls[0]["url"] == "https://api.unsplash.test/search/photos"
    assert calls[0]["params"] == {"query": "red shoes", "client_id": "key-123"}
    assert calls[0]["timeout"] > 0


def test_zero_results_raises(monkeypatch):
    _patch_get(monkeypatch, FakeResponse({"results": []}))
    with pytest.raises(ImageSearchError):
        UnsplashImageSearch(access_key="k").search("nothing")


def test_malformed_payload_raises(monkeypatch):
    _patch_get(monkeypatch, FakeResponse({"results": [{"urls": {}}]}))
    with pytest.raises(ImageSearchError):
        UnsplashImageSearch(access_key="k").search("x")

    _patch_get(monkeypatch, FakeResponse(ValueError("not json")))
    with pytest.raises(ImageSearchError):
        UnsplashImageSearch(access_key="k").search("x")


def test_network_and_http_errors_raise_upstream_failure(monkeypatch):
    _patch_get(monkeypatch, requests.ConnectionError("down"))
    with pytest.raises(UpstreamFailure):
        UnsplashImageSearch(access_key="k").search("x")

    _patch_get(monkeypatch, FakeResponse({}, status_code=401))
    with pytest.raises(ImageSearchError):
        UnsplashImageSearch(access_key="k").search("x")
