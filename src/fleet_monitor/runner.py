from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

from .change_detector import ChangeDetector, StateStore
from .errors import StateWriteError
from .models import ChangeVerdict, FleetRecords, FleetSnapshot, NotificationDecision, QueueHealth
from .notification import DEFAULT_SUBJECT, decide_notification, fleet_paragraph
from .queue_health import evaluate_queue_health
from .snapshot import build_snapshot

LOGGER = logging.getLogger(__name__)


class NotificationTransport(Protocol):
    def send(self, subject: str, body: str) -> None: ...


@dataclass(slots=True, frozen=True)
class RunOptions:
    email_requested: bool = False
    track_changes: bool = False
    subject: str = DEFAULT_SUBJECT


@dataclass(slots=True, frozen=True)
class RunResult:
    snapshot: FleetSnapshot
    verdict: ChangeVerdict
    queue_warnings: tuple[str, ...]
    decision: NotificationDecision


class MonitorRun:
    """One poll of the fleet and queue health, ending in at most one notification."""

    def __init__(
        self,
        *,
        fetch_fleet: Callable[[], FleetRecords],
        fetch_queue_health: Callable[[], QueueHealth],
        store: StateStore,
        transport: NotificationTransport,
        options: RunOptions | None = None,
    ) -> None:
        self.fetch_fleet = fetch_fleet
        self.fetch_queue_health = fetch_queue_health
        self.store = store
        self.transport = transport
        self.options = options or RunOptions()

    def execute(self) -> RunResult:
        records, health = self._poll()

        snapshot = build_snapshot(records.instances, records.statuses)
        rendering = snapshot.render()
        LOGGER.info("Fleet status (%d instances):\n%s", len(snapshot), rendering)

        write_error: StateWriteError | None = None
        detector = ChangeDetector(self.store, track_changes=self.options.track_changes)
        try:
            verdict = detector.detect(rendering)
        except StateWriteError as error:
            LOGGER.error("%s", error)
            verdict = error.verdict
            write_error = error

        warnings = evaluate_queue_health(health)
        for warning in warnings:
            LOGGER.warning(warning)

        decision = decide_notification(
            fleet_paragraph(
                rendering,
                email_requested=self.options.email_requested,
                track_changes=self.options.track_changes,
                verdict=verdict,
            ),
            warnings,
        )
        if decision.should_send and decision.body is not None:
            try:
                self.transport.send(self.options.subject, decision.body)
            except Exception as error:
                if write_error is not None:
                    raise error from write_error
                raise
        else:
            LOGGER.info("Nothing to notify (verdict: %s).", verdict.value)

        if write_error is not None:
            raise write_error
        return RunResult(
            snapshot=snapshot,
            verdict=verdict,
            queue_warnings=tuple(warnings),
            decision=decision,
        )

    def _poll(self) -> tuple[FleetRecords, QueueHealth]:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="poll") as pool:
            fleet_future = pool.submit(self.fetch_fleet)
            health_future = pool.submit(self.fetch_queue_health)
            records = fleet_future.result()
            health = health_future.result()
        LOGGER.debug("Queue health: %s", health)
        return records, health
