from __future__ import annotations

import logging
from typing import Protocol

from .errors import StateWriteError
from .models import ChangeVerdict

LOGGER = logging.getLogger(__name__)


class StateStore(Protocol):
    def load(self) -> str | None: ...

    def save(self, text: str) -> None: ...


def compare_renderings(current: str, previous: str | None) -> ChangeVerdict:
    if previous is None or previous != current:
        return ChangeVerdict.CHANGED
    return ChangeVerdict.UNCHANGED


class ChangeDetector:
    def __init__(self, store: StateStore, *, track_changes: bool) -> None:
        self.store = store
        self.track_changes = track_changes

    def detect(self, rendering: str) -> ChangeVerdict:
        """Compare against the stored baseline, replacing it when it differs.

        With change tracking off the store is never touched and the verdict
        is always DISABLED.
        """
        if not self.track_changes:
            return ChangeVerdict.DISABLED

        verdict = compare_renderings(rendering, self.store.load())
        if verdict is ChangeVerdict.CHANGED:
            LOGGER.info("Fleet state changed; updating baseline.")
            try:
                self.store.save(rendering)
            except OSError as error:
                raise StateWriteError(verdict, error) from error
        else:
            LOGGER.debug("Fleet state unchanged.")
        return verdict
