from __future__ import annotations

from .models import QueueHealth

PENDING_THRESHOLD = 500
ERROR_THRESHOLD = 500


def evaluate_queue_health(health: QueueHealth) -> list[str]:
    warnings: list[str] = []
    if health.pending_count > PENDING_THRESHOLD:
        warnings.append(f"WARNING: Queue length is {health.pending_count}")
    if health.error_count > ERROR_THRESHOLD:
        warnings.append(f"WARNING: Error queue length is {health.error_count}")
    return warnings
