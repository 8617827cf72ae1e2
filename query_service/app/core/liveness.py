"""
Agent liveness from heartbeat freshness.

An endpoint is alive when its latest ``agent.alive`` sample is at most
``threshold`` seconds old.  No sample (fetch failure, unknown endpoint)
always means not alive.
"""

from __future__ import annotations

import time
from typing import Optional, Sequence

from .models import LastSample, LivenessRecord

# Reserved counter every agent reports on each heartbeat
ALIVE_COUNTER = "agent.alive"

DEFAULT_ALIVE_THRESHOLD_SECONDS = 120


def is_alive(
    last_sample_timestamp: Optional[int],
    now: int,
    threshold_seconds: int = DEFAULT_ALIVE_THRESHOLD_SECONDS,
) -> bool:
    if last_sample_timestamp is None:
        return False
    return now - last_sample_timestamp <= threshold_seconds


def evaluate_liveness(
    endpoints: Sequence[str],
    samples: Sequence[Optional[LastSample]],
    now: int | None = None,
    threshold_seconds: int = DEFAULT_ALIVE_THRESHOLD_SECONDS,
) -> list[LivenessRecord]:
    """Pair each endpoint with its heartbeat sample and judge freshness.

    ``samples`` must be positionally aligned with ``endpoints``.
    """
    if len(endpoints) != len(samples):
        raise ValueError("endpoints and samples must have the same length")
    if now is None:
        now = int(time.time())

    records = []
    for endpoint, sample in zip(endpoints, samples):
        last_ts = sample.value.timestamp if sample is not None else None
        records.append(LivenessRecord(endpoint, is_alive(last_ts, now, threshold_seconds)))
    return records
