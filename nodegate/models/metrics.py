from __future__ import annotations

import time

from pydantic import BaseModel, Field, computed_field


def _percent(used: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return used / total * 100


class CpuTimes(BaseModel):
    """Cumulative time-in-state counters for all CPUs, in platform ticks.

    ``system`` excludes idle time on every platform so that ``total`` is a
    plain sum of disjoint states.
    """

    model_config = {"frozen": True}

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    timestamp: float = Field(default_factory=time.monotonic)

    @property
    def total(self) -> int:
        return self.user + self.nice + self.system + self.idle + self.iowait + self.irq


class SystemMetrics(BaseModel):
    """Point-in-time snapshot of local system health.

    A field whose platform query failed keeps its zero value.
    """

    model_config = {"frozen": True}

    cpu_percent: float = 0.0
    memory_used: int = 0
    memory_total: int = 0
    disk_used: int = 0
    disk_total: int = 0
    network_bytes_sent: int = 0
    network_bytes_recv: int = 0
    uptime_seconds: int = 0

    @computed_field
    @property
    def memory_percent(self) -> float:
        return _percent(self.memory_used, self.memory_total)

    @computed_field
    @property
    def disk_percent(self) -> float:
        return _percent(self.disk_used, self.disk_total)
