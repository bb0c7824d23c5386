from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_STATE_PATH = Path("/tmp/monitor-state.txt")

LOGGER = logging.getLogger(__name__)


class SnapshotStateStore:
    """Keeps the last observed fleet rendering in a single text file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else DEFAULT_STATE_PATH

    def load(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            LOGGER.debug("No previous state at %s: %s", self.path, error)
            return None

    def save(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())

