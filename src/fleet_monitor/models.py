from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNNAMED = "UNNAMED"


class LifecycleState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    SHUTTING_DOWN = "shutting-down"
    TERMINATED = "terminated"


class HealthStatus(str, Enum):
    OK = "ok"
    IMPAIRED = "impaired"
    INSUFFICIENT_DATA = "insufficient-data"
    NOT_APPLICABLE = "not-applicable"
    INITIALIZING = "initializing"


class ChangeVerdict(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    DISABLED = "disabled"


@dataclass(slots=True, frozen=True)
class InstanceSummary:
    instance_id: str
    name: str
    lifecycle_state: LifecycleState
    instance_status: HealthStatus
    system_status: HealthStatus

    def render(self) -> str:
        return (
            f"{self.instance_id} {self.name:20} {self.lifecycle_state.value:20} "
            f"{self.instance_status.value:20} {self.system_status.value:20}"
        ).rstrip()


@dataclass(slots=True, frozen=True)
class FleetSnapshot:
    instances: tuple[InstanceSummary, ...] = ()

    def render(self) -> str:
        return "\n".join(instance.render() for instance in self.instances)

    def __len__(self) -> int:
        return len(self.instances)


@dataclass(slots=True, frozen=True)
class FleetRecords:
    """Raw EC2 records as returned by describe_instances / describe_instance_status."""

    instances: list[dict[str, Any]] = field(default_factory=list)
    statuses: list[dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class QueueHealth:
    pending_count: int
    error_count: int


@dataclass(slots=True, frozen=True)
class NotificationDecision:
    should_send: bool
    body: str | None = None
