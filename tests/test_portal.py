from __future__ import annotations

import json

import httpx
import pytest

from fleet_monitor.errors import ConfigurationError, UpstreamFetchError
from fleet_monitor.models import QueueHealth
from fleet_monitor.portal import LoginPayload, PortalClient, parse_queue_health


def _portal_transport(health_body: object, *, token: str = "Bearer abc") -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login":
            payload = json.loads(request.content)
            if payload != {"email": "ops@example.com", "password": "secret"}:
                return httpx.Response(401)
            return httpx.Response(204, headers={"Authorization": token})
        if request.url.path == "/admin/health":
            if request.headers.get("Authorization") != "Bearer abc":
                return httpx.Response(401)
            return httpx.Response(200, json=health_body)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def test_login_payload_from_env() -> None:
    payload = LoginPayload.from_env({"PORTAL_EMAIL": " ops@example.com ", "PORTAL_PASSWORD": "secret"})
    assert payload == LoginPayload(email="ops@example.com", password="secret")


def test_login_payload_requires_credentials() -> None:
    with pytest.raises(ConfigurationError):
        LoginPayload.from_env({"PORTAL_EMAIL": "ops@example.com"})


def test_fetch_queue_health() -> None:
    transport = _portal_transport({"queue": {"pending": 12, "errors": 3}, "database": "ok"})

    with PortalClient("https://portal.test/", transport=transport) as client:
        health = client.fetch_queue_health(LoginPayload("ops@example.com", "secret"))

    assert health == QueueHealth(pending_count=12, error_count=3)


def test_bad_credentials_raise_http_error() -> None:
    transport = _portal_transport({"queue": {"pending": 0, "errors": 0}})

    with PortalClient("https://portal.test", transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError):
            client.login(LoginPayload("ops@example.com", "wrong"))


def test_login_without_token_is_rejected() -> None:
    transport = _portal_transport({"queue": {"pending": 0, "errors": 0}}, token="")

    with PortalClient("https://portal.test", transport=transport) as client:
        with pytest.raises(UpstreamFetchError):
            client.login(LoginPayload("ops@example.com", "secret"))


@pytest.mark.parametrize(
    "body",
    [
        [],
        {},
        {"queue": None},
        {"queue": {"pending": 1}},
        {"queue": {"pending": -1, "errors": 0}},
        {"queue": {"pending": "7", "errors": 0}},
        {"queue": {"pending": True, "errors": 0}},
    ],
)
def test_parse_queue_health_rejects_malformed(body: object) -> None:
    with pytest.raises(UpstreamFetchError):
        parse_queue_health(body)
