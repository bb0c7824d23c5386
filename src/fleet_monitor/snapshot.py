from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .errors import MissingStatusFieldError, UpstreamFetchError
from .models import UNNAMED, FleetSnapshot, HealthStatus, InstanceSummary, LifecycleState


def build_snapshot(
    instances: Iterable[dict[str, Any]],
    statuses: Iterable[dict[str, Any]],
) -> FleetSnapshot:
    """Correlate instance descriptions with their status records.

    Instances keep their upstream listing order. Instances without a status
    record (and status records without an instance) are dropped.
    """
    status_by_id: dict[str, dict[str, Any]] = {}
    for status in statuses:
        status_by_id.setdefault(_instance_id(status), status)

    summaries: list[InstanceSummary] = []
    for instance in instances:
        instance_id = _instance_id(instance)
        status = status_by_id.get(instance_id)
        if status is None:
            continue
        summaries.append(_to_summary(instance_id, instance, status))
    return FleetSnapshot(instances=tuple(summaries))


def instance_name(tags: Iterable[dict[str, str]] | None) -> str:
    for tag in tags or ():
        if tag.get("Key") == "Name":
            return tag.get("Value", "")
    return UNNAMED


def _to_summary(instance_id: str, instance: dict[str, Any], status: dict[str, Any]) -> InstanceSummary:
    return InstanceSummary(
        instance_id=instance_id,
        name=instance_name(instance.get("Tags")),
        lifecycle_state=_enum_field(
            LifecycleState, status, "InstanceState", "Name", instance_id=instance_id
        ),
        instance_status=_enum_field(
            HealthStatus, status, "InstanceStatus", "Status", instance_id=instance_id
        ),
        system_status=_enum_field(
            HealthStatus, status, "SystemStatus", "Status", instance_id=instance_id
        ),
    )


def _instance_id(record: dict[str, Any]) -> str:
    try:
        instance_id = record["InstanceId"]
    except (KeyError, TypeError) as error:
        raise UpstreamFetchError(f"EC2 record without InstanceId: {record!r}") from error
    if not isinstance(instance_id, str) or not instance_id:
        raise UpstreamFetchError(f"EC2 record with invalid InstanceId: {instance_id!r}")
    return instance_id


def _enum_field(enum_type, status: dict[str, Any], section: str, key: str, *, instance_id: str):
    try:
        value = status[section][key]
    except (KeyError, TypeError) as error:
        raise MissingStatusFieldError(instance_id, f"{section}.{key}") from error
    try:
        return enum_type(value)
    except ValueError as error:
        raise UpstreamFetchError(
            f"Instance {instance_id} has unrecognised {section}.{key}: {value!r}"
        ) from error
