from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import boto3

from .errors import UpstreamFetchError
from .models import FleetRecords

DEFAULT_PROFILE = None
DEFAULT_REGION = "us-east-1"

LOGGER = logging.getLogger(__name__)


class AwsEc2Service:
    def __init__(
        self,
        profile: str | None = DEFAULT_PROFILE,
        region: str | None = DEFAULT_REGION,
        *,
        client: Any | None = None,
    ) -> None:
        self.profile = profile or DEFAULT_PROFILE
        self.region = region or DEFAULT_REGION
        if client is None:
            session = boto3.Session(profile_name=self.profile, region_name=self.region)
            client = session.client("ec2")
        self._client = client

    def fetch_fleet(
        self,
        instance_ids: Sequence[str] | None = None,
        *,
        include_all_instances: bool = False,
    ) -> FleetRecords:
        instances = self.describe_instances(instance_ids)
        statuses = self.describe_instance_status(
            instance_ids, include_all_instances=include_all_instances
        )
        LOGGER.debug(
            "Fetched %d instances and %d status records in %s",
            len(instances),
            len(statuses),
            self.region,
        )
        return FleetRecords(instances=instances, statuses=statuses)

    def describe_instances(self, instance_ids: Sequence[str] | None = None) -> list[dict[str, Any]]:
        paginator = self._client.get_paginator("describe_instances")
        instances: list[dict[str, Any]] = []
        for page in paginator.paginate(**_id_filter(instance_ids)):
            for reservation in _list_field(page, "Reservations"):
                instances.extend(_list_field(reservation, "Instances"))
        return instances

    def describe_instance_status(
        self,
        instance_ids: Sequence[str] | None = None,
        *,
        include_all_instances: bool = False,
    ) -> list[dict[str, Any]]:
        paginator = self._client.get_paginator("describe_instance_status")
        statuses: list[dict[str, Any]] = []
        for page in paginator.paginate(
            IncludeAllInstances=include_all_instances,
            **_id_filter(instance_ids),
        ):
            statuses.extend(_list_field(page, "InstanceStatuses"))
        return statuses


def build_mock_fleet(region: str | None = DEFAULT_REGION) -> FleetRecords:
    short_region = (region or DEFAULT_REGION).replace("-", "")
    bastion = f"i-{short_region}a1b2c3d4e5f6"
    app = f"i-{short_region}112233445566"
    rabbit = f"i-{short_region}998877665544"
    return FleetRecords(
        instances=[
            {"InstanceId": bastion, "Tags": [{"Key": "Name", "Value": "demo-bastion"}]},
            {"InstanceId": app, "Tags": [{"Key": "Name", "Value": "demo-app-01"}]},
            {"InstanceId": rabbit, "Tags": [{"Key": "Role", "Value": "queue"}]},
        ],
        statuses=[
            _mock_status(bastion, "running", "ok", "ok"),
            _mock_status(app, "running", "initializing", "ok"),
            _mock_status(rabbit, "running", "impaired", "ok"),
        ],
    )


def _mock_status(instance_id: str, state: str, instance_status: str, system_status: str) -> dict[str, Any]:
    return {
        "InstanceId": instance_id,
        "InstanceState": {"Name": state},
        "InstanceStatus": {"Status": instance_status},
        "SystemStatus": {"Status": system_status},
    }


def _id_filter(instance_ids: Sequence[str] | None) -> dict[str, Any]:
    if not instance_ids:
        return {}
    return {"InstanceIds": list(instance_ids)}


def _list_field(mapping: Any, key: str) -> list[Any]:
    try:
        value = mapping.get(key, [])
    except AttributeError as error:
        raise UpstreamFetchError(f"Unexpected EC2 response shape: {mapping!r}") from error
    if not isinstance(value, list):
        raise UpstreamFetchError(f"Unexpected EC2 {key} value: {value!r}")
    return value
