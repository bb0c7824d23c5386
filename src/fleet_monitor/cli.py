from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

import httpx
from botocore.exceptions import BotoCoreError, ClientError

from .aws_api import AwsEc2Service, build_mock_fleet
from .config import DEFAULT_CONFIG_PATH, MonitorConfig, load_monitor_config
from .errors import FleetMonitorError
from .mailer import ConsoleTransport, SesTransport
from .models import FleetRecords, QueueHealth
from .portal import LoginPayload, PortalClient, build_mock_queue_health
from .runner import MonitorRun, NotificationTransport, RunOptions
from .state_store import SnapshotStateStore

LOGGER = logging.getLogger("fleet-monitor")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="EC2 fleet and queue health monitor")
    parser.add_argument("-r", "--region", default=None, help="AWS region name")
    parser.add_argument("--profile", default=None, help="AWS CLI profile name")
    parser.add_argument("-a", "--api", default=None, help="Management portal base URL")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-e", "--email", action="store_true", help="Email the fleet summary")
    parser.add_argument(
        "-o",
        "--only-changes",
        action="store_true",
        help="Only report the fleet summary when it differs from the last run",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="YAML file with region, portal and notification settings",
    )
    parser.add_argument("--state-file", default=None, help="File holding the last fleet summary")
    parser.add_argument("--mock", action="store_true", help="Use built-in sample fleet and queue data")
    parser.add_argument("--dry-run", action="store_true", help="Print the notification instead of sending it")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for noisy in ("botocore", "boto3", "urllib3", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_run(args: argparse.Namespace, config: MonitorConfig) -> MonitorRun:
    region = args.region or config.region
    profile = args.profile or config.profile
    api_url = args.api or config.api_url

    if args.mock:
        def fetch_fleet() -> FleetRecords:
            return build_mock_fleet(region=region)

        def fetch_queue_health() -> QueueHealth:
            return build_mock_queue_health()
    else:
        def fetch_fleet() -> FleetRecords:
            service = AwsEc2Service(profile=profile, region=region)
            return service.fetch_fleet(
                config.instance_ids,
                include_all_instances=config.include_all_instances,
            )

        def fetch_queue_health() -> QueueHealth:
            payload = LoginPayload.from_env()
            with PortalClient(api_url) as client:
                return client.fetch_queue_health(payload)

    transport: NotificationTransport
    if args.dry_run or args.mock:
        transport = ConsoleTransport()
    else:
        transport = SesTransport(
            config.notification.sender,
            config.notification.recipients,
            region=config.notification.ses_region,
            profile=profile,
        )

    return MonitorRun(
        fetch_fleet=fetch_fleet,
        fetch_queue_health=fetch_queue_health,
        store=SnapshotStateStore(args.state_file or config.state_path),
        transport=transport,
        options=RunOptions(
            email_requested=args.email,
            track_changes=args.only_changes,
            subject=config.notification.subject,
        ),
    )


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = load_monitor_config(args.config)
        build_run(args, config).execute()
    except (FleetMonitorError, ClientError, BotoCoreError, httpx.HTTPError, OSError) as error:
        LOGGER.error("Monitoring run failed: %s", error)
        return 1
    return 0
