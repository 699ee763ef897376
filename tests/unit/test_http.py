from __future__ import annotations

import logging

import pytest
import requests

from listings_importer.common.http import (
    HttpClient,
    HttpRequestError,
    RetryConfig,
    RetryableHttpError,
    parse_retry_after,
)


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises_json: bool = False, headers=None):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json
        self.headers = headers or {}

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


def test_http_get_json_success(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, {"ok": True}))
    payload = client.get_json("https://example.com")

    assert payload == {"ok": True}


def test_http_retryable_status_raises_retryable_error(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(429, {"x": 1}))

    with pytest.raises(RetryableHttpError) as excinfo:
        client.get_json("https://example.com")
    assert excinfo.value.status_code == 429


def test_http_client_error_is_not_retried(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.01, max_wait=0.01))
    calls = []

    def fake_request(**kwargs):
        calls.append(kwargs)
        return FakeResponse(400, {"message": "bad property"})

    monkeypatch.setattr(client.session, "request", fake_request)

    with pytest.raises(HttpRequestError) as excinfo:
        client.post_json("https://example.com/objects", body={"properties": {}})
    assert not isinstance(excinfo.value, RetryableHttpError)
    assert len(calls) == 1


def test_http_retries_transient_failures_then_succeeds(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda _seconds: None)
    client = HttpClient(retry=RetryConfig(max_attempts=3, multiplier=0.01, max_wait=0.01))
    responses = [FakeResponse(503), FakeResponse(200, {"results": []})]

    monkeypatch.setattr(client.session, "request", lambda **_kwargs: responses.pop(0))

    assert client.get_json("https://example.com") == {"results": []}
    assert responses == []


def test_http_connection_error_becomes_retryable(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))

    def fake_request(**_kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(client.session, "request", fake_request)

    with pytest.raises(RetryableHttpError):
        client.get_json("https://example.com")


def test_http_invalid_json_raises(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(200, raises_json=True))

    with pytest.raises(HttpRequestError):
        client.get_json("https://example.com")


def test_http_no_content_returns_empty_mapping(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: FakeResponse(204, raises_json=True))

    assert client.patch_json("https://example.com/objects/1", body={}) == {}


def test_http_sends_json_body_and_headers(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    seen = {}

    def fake_request(**kwargs):
        seen.update(kwargs)
        return FakeResponse(201, {"id": "1"})

    monkeypatch.setattr(client.session, "request", fake_request)
    client.post_json("https://example.com/objects", body={"a": 1}, headers={"Authorization": "Bearer x"})

    assert seen["method"] == "POST"
    assert seen["json"] == {"a": 1}
    assert seen["headers"]["Authorization"] == "Bearer x"
    assert seen["headers"]["Accept"] == "application/json"


def test_http_honours_retry_after_and_logs_retry(monkeypatch, caplog):
    sleeps = []
    monkeypatch.setattr("time.sleep", lambda seconds: sleeps.append(seconds))
    logger = logging.getLogger("listings_importer.test_http")
    client = HttpClient(retry=RetryConfig(max_attempts=2, multiplier=0.01, max_wait=5.0), logger=logger)
    responses = [
        FakeResponse(429, {"message": "You have reached your secondly limit."}, headers={"Retry-After": "2"}),
        FakeResponse(200, {"ok": True}),
    ]
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: responses.pop(0))

    with caplog.at_level(logging.WARNING, logger=logger.name):
        assert client.get_json("https://api.example.com/crm") == {"ok": True}

    assert sleeps == [2.0]
    retry_records = [record for record in caplog.records if getattr(record, "event", None) == "HTTP_RETRY"]
    assert len(retry_records) == 1
    assert retry_records[0].attempt == 1
    assert "secondly limit" in retry_records[0].getMessage()


def test_http_error_message_includes_api_detail(monkeypatch):
    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(
        client.session,
        "request",
        lambda **_kwargs: FakeResponse(400, {"status": "error", "message": "Property values were not valid"}),
    )

    with pytest.raises(HttpRequestError, match="Property values were not valid") as excinfo:
        client.post_json("https://api.example.com/crm/v3/objects/listings", body={"properties": {}})
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, None), ("", None), ("3", 3.0), (" 1.5 ", 1.5), ("-1", None), ("Wed, 21 Oct 2015 07:28:00 GMT", None)],
)
def test_parse_retry_after(value, expected):
    assert parse_retry_after(value) == expected
