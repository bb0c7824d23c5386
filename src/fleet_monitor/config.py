from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .aws_api import DEFAULT_REGION
from .errors import ConfigurationError
from .mailer import DEFAULT_SES_REGION
from .notification import DEFAULT_SUBJECT
from .portal import DEFAULT_API_URL
from .state_store import DEFAULT_STATE_PATH

DEFAULT_CONFIG_PATH = Path("fleet-monitor.yaml")


@dataclass(slots=True, frozen=True)
class NotificationConfig:
    sender: str = "Fleet Monitor <noreply@localhost>"
    recipients: tuple[str, ...] = ()
    subject: str = DEFAULT_SUBJECT
    ses_region: str = DEFAULT_SES_REGION


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    region: str = DEFAULT_REGION
    profile: str | None = None
    api_url: str = DEFAULT_API_URL
    state_path: Path = DEFAULT_STATE_PATH
    include_all_instances: bool = False
    instance_ids: tuple[str, ...] = ()
    notification: NotificationConfig = field(default_factory=NotificationConfig)


DEFAULT_MONITOR_CONFIG = MonitorConfig()


def load_monitor_config(config_path: str | Path | None = None) -> MonitorConfig:
    path = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_PATH
    if not path.is_file():
        return DEFAULT_MONITOR_CONFIG

    with path.open("r", encoding="utf-8") as handle:
        try:
            loaded = yaml.safe_load(handle) or {}
        except yaml.YAMLError as error:
            raise ConfigurationError(f"Invalid configuration file {path}: {error}") from error

    defaults = DEFAULT_MONITOR_CONFIG
    state_path = _coerce_str(_safe_mapping_get(loaded, "state_path"), fallback=None)
    return MonitorConfig(
        region=_coerce_str(_safe_mapping_get(loaded, "region"), fallback=defaults.region),
        profile=_coerce_str(_safe_mapping_get(loaded, "profile"), fallback=defaults.profile),
        api_url=_coerce_str(_safe_mapping_get(loaded, "api_url"), fallback=defaults.api_url),
        state_path=Path(state_path).expanduser() if state_path else defaults.state_path,
        include_all_instances=_coerce_bool(
            _safe_mapping_get(loaded, "include_all_instances"),
            fallback=defaults.include_all_instances,
        ),
        instance_ids=_coerce_str_tuple(_safe_mapping_get(loaded, "instance_ids")),
        notification=_parse_notification(_safe_mapping_get(loaded, "notification")),
    )


def _parse_notification(value: Any) -> NotificationConfig:
    defaults = DEFAULT_MONITOR_CONFIG.notification
    recipients = _safe_mapping_get(value, "recipients")
    if isinstance(recipients, str):
        recipients = [recipients]
    return NotificationConfig(
        sender=_coerce_str(_safe_mapping_get(value, "sender"), fallback=defaults.sender),
        recipients=_coerce_str_tuple(recipients),
        subject=_coerce_str(_safe_mapping_get(value, "subject"), fallback=defaults.subject),
        ses_region=_coerce_str(_safe_mapping_get(value, "ses_region"), fallback=defaults.ses_region),
    )


def _coerce_str(value: Any, fallback: str | None) -> str | None:
    if value is None:
        return fallback
    text = str(value).strip()
    return text or fallback


def _coerce_bool(value: Any, fallback: bool) -> bool:
    if isinstance(value, bool):
        return value
    return fallback


def _coerce_str_tuple(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return ()
    try:
        iterator = iter(value)
    except TypeError:
        return ()
    return tuple(text for item in iterator if item is not None and (text := str(item).strip()))


def _safe_mapping_get(mapping: Any, key: str, fallback: Any = None) -> Any:
    try:
        return mapping[key]
    except (KeyError, TypeError):
        return fallback
