from __future__ import annotations

from .models import ChangeVerdict


class FleetMonitorError(Exception):
    """Base class for failures that abort a monitoring run."""


class ConfigurationError(FleetMonitorError):
    pass


class UpstreamFetchError(FleetMonitorError):
    """A data source returned something that cannot be interpreted."""


class MissingStatusFieldError(UpstreamFetchError):
    def __init__(self, instance_id: str, field_name: str) -> None:
        super().__init__(f"Instance {instance_id} status record is missing {field_name}")
        self.instance_id = instance_id
        self.field_name = field_name


class StateWriteError(FleetMonitorError):
    """The new baseline could not be persisted.

    The verdict that was reached before the write is kept so the caller can
    still act on it before reporting the failure.
    """

    def __init__(self, verdict: ChangeVerdict, cause: OSError) -> None:
        super().__init__(f"Failed to write snapshot state: {cause}")
        self.verdict = verdict


class DeliveryError(FleetMonitorError):
    pass
