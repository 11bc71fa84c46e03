from __future__ import annotations

import threading

from nodegate.models.metrics import CpuTimes


class CpuSampler:
    """Turns cumulative CPU counters into a usage percentage.

    Holds the previous sample for the lifetime of the process. The first
    sample has nothing to compare against and reports 0. Concurrent callers
    are serialised on the single piece of carried state.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._previous: CpuTimes | None = None

    def sample(self, times: CpuTimes) -> float:
        with self._lock:
            previous = self._previous
            self._previous = times

        if previous is None:
            return 0.0

        total_delta = times.total - previous.total
        idle_delta = times.idle - previous.idle
        if total_delta <= 0:
            return 0.0

        usage = 100 * (1 - idle_delta / total_delta)
        return min(max(usage, 0.0), 100.0)

    def reset(self) -> None:
        with self._lock:
            self._previous = None

    @property
    def has_sample(self) -> bool:
        return self._previous is not None
