from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import ConfigurationError, UpstreamFetchError
from .models import QueueHealth

DEFAULT_API_URL = "https://api.fieldkit.org"
EMAIL_ENV = "PORTAL_EMAIL"
PASSWORD_ENV = "PORTAL_PASSWORD"

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class LoginPayload:
    email: str
    password: str

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> LoginPayload:
        env = os.environ if environ is None else environ
        email = (env.get(EMAIL_ENV) or "").strip()
        password = env.get(PASSWORD_ENV) or ""
        if not email or not password:
            raise ConfigurationError(f"{EMAIL_ENV} and {PASSWORD_ENV} must be set")
        return cls(email=email, password=password)


class PortalClient:
    """Minimal management-portal client: log in, then read queue health."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        timeout: float = 20.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or DEFAULT_API_URL).rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> PortalClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def login(self, payload: LoginPayload) -> str:
        resp = self._client.post("/login", json={"email": payload.email, "password": payload.password})
        resp.raise_for_status()
        token = (resp.headers.get("Authorization") or "").strip()
        if not token:
            raise UpstreamFetchError("Portal login succeeded without an Authorization token")
        return token

    def query_admin_health(self, token: str) -> QueueHealth:
        resp = self._client.get("/admin/health", headers={"Authorization": token})
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as error:
            raise UpstreamFetchError("Portal health response is not JSON") from error
        LOGGER.debug("Portal health: %s", data)
        return parse_queue_health(data)

    def fetch_queue_health(self, payload: LoginPayload) -> QueueHealth:
        return self.query_admin_health(self.login(payload))


def parse_queue_health(data: Any) -> QueueHealth:
    queue = data.get("queue") if isinstance(data, dict) else None
    if not isinstance(queue, dict):
        raise UpstreamFetchError(f"Portal health response has no queue section: {data!r}")
    return QueueHealth(
        pending_count=_count(queue, "pending"),
        error_count=_count(queue, "errors"),
    )


def _count(queue: dict[str, Any], key: str) -> int:
    value = queue.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise UpstreamFetchError(f"Portal queue {key} is not a non-negative integer: {value!r}")
    return value


def build_mock_queue_health() -> QueueHealth:
    return QueueHealth(pending_count=42, error_count=3)
