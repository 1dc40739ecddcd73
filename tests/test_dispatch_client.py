import json

import httpx
import pytest

from src.dispatcher.services.dispatch.client import (
    DispatchAPIError,
    DispatchClient,
    DispatchNotConfiguredError,
    extract_journey_id,
)


def _client(monkeypatch: pytest.MonkeyPatch, handler, **kwargs) -> DispatchClient:
    client = DispatchClient(
        host="dispatch.example.com",
        api_path="/v2/",
        app_key="app",
        secret_key="secret",
        backoff_seconds=0.0,
        **kwargs,
    )
    monkeypatch.setattr(
        client,
        "_get_client",
        lambda: httpx.Client(
            transport=httpx.MockTransport(handler),
            auth=httpx.BasicAuth(client.app_key, client.secret_key),
        ),
    )
    return client


def test_update_journey_posts_envelope(monkeypatch: pytest.MonkeyPatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = request.url
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"body": {"journeys": [{"id": 9876}]}})

    client = _client(monkeypatch, handler)
    body = client.update_journey({"journeys": [{"id": None, "bookings": []}]})

    assert seen["method"] == "POST"
    assert seen["url"].path == "/v2/journey/update"
    assert seen["url"].params["app_key"] == "app"
    assert seen["body"]["journeys"][0]["id"] is None
    assert seen["auth"].startswith("Basic ")
    assert extract_journey_id(body) == 9876


def test_http_error_raises_dispatch_error(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, lambda request: httpx.Response(422, text="bad booking"))

    with pytest.raises(DispatchAPIError) as excinfo:
        client.update_journey({})

    assert excinfo.value.status_code == 422
    assert "bad booking" in str(excinfo.value)


def test_error_body_raises_dispatch_error(monkeypatch: pytest.MonkeyPatch):
    reply = {"status": {"type": "error", "message": "Journey is completed"}}
    client = _client(monkeypatch, lambda request: httpx.Response(200, json=reply))

    with pytest.raises(DispatchAPIError, match="Journey is completed"):
        client.update_journey({})


def test_network_errors_are_retried(monkeypatch: pytest.MonkeyPatch):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"body": {"journeys": [{"id": 1}]}})

    client = _client(monkeypatch, handler, max_retries=3)

    assert extract_journey_id(client.update_journey({})) == 1
    assert len(attempts) == 3


def test_network_errors_give_up_after_max_retries(monkeypatch: pytest.MonkeyPatch):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(monkeypatch, handler, max_retries=1)

    with pytest.raises(ConnectionError):
        client.update_journey({})


def test_empty_reply_returns_empty_body(monkeypatch: pytest.MonkeyPatch):
    client = _client(monkeypatch, lambda request: httpx.Response(204))
    assert client.update_journey({}) == {}


def test_missing_configuration_is_rejected(monkeypatch: pytest.MonkeyPatch):
    from src.dispatcher.config import settings

    monkeypatch.setattr(settings, "dispatch_host", None)
    with pytest.raises(DispatchNotConfiguredError):
        DispatchClient(app_key="app", secret_key="secret")


def test_extract_journey_id_handles_missing_block():
    assert extract_journey_id({}) is None
    assert extract_journey_id({"journeys": []}) is None
