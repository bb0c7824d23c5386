from __future__ import annotations

from typing import Any

import pytest


def make_instance(instance_id: str, name: str | None = None, **extra_tags: str) -> dict[str, Any]:
    tags = [{"Key": key, "Value": value} for key, value in extra_tags.items()]
    if name is not None:
        tags.append({"Key": "Name", "Value": name})
    return {"InstanceId": instance_id, "Tags": tags}


def make_status(
    instance_id: str,
    state: str = "running",
    instance_status: str = "ok",
    system_status: str = "ok",
) -> dict[str, Any]:
    return {
        "InstanceId": instance_id,
        "InstanceState": {"Code": 16, "Name": state},
        "InstanceStatus": {"Status": instance_status},
        "SystemStatus": {"Status": system_status},
    }


class FakeStore:
    def __init__(self, text: str | None = None, *, fail_writes: bool = False) -> None:
        self.text = text
        self.fail_writes = fail_writes
        self.loads = 0
        self.saves: list[str] = []

    def load(self) -> str | None:
        self.loads += 1
        return self.text

    def save(self, text: str) -> None:
        if self.fail_writes:
            raise PermissionError("read-only")
        self.saves.append(text)
        self.text = text


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    def send(self, subject: str, body: str) -> None:
        self.sent.append((subject, body))


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
