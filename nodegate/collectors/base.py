from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TypeVar

from nodegate.commands import CommandError
from nodegate.config import settings
from nodegate.engine.cpu_sampler import CpuSampler
from nodegate.models.metrics import CpuTimes, SystemMetrics

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectorError(Exception):
    """Metrics cannot be collected on this host at all."""


class MetricUnavailableError(Exception):
    """A single measurement could not be taken."""


# Expected failures, logged quietly. Anything else is logged with a traceback;
# either way the field reads as zero.
FIELD_ERRORS = (OSError, ValueError, CommandError, MetricUnavailableError)


class BaseCollector(ABC):
    """Abstract base for per-platform metrics collectors.

    Subclasses implement one method per measurement. ``collect()`` runs each
    independently; a measurement that fails leaves its fields at zero and the
    rest of the sample is still returned.
    """

    name: str = "base"

    def __init__(self, sampler: CpuSampler | None = None, disk_path: str | None = None) -> None:
        self.sampler = sampler if sampler is not None else CpuSampler()
        self.disk_path = disk_path if disk_path is not None else settings.disk_path

    # ── measurements ────────────────────────────────────

    @abstractmethod
    def cpu_times(self) -> CpuTimes:
        """Cumulative CPU time-in-state counters."""
        ...

    @abstractmethod
    def memory(self) -> tuple[int, int]:
        """``(used, total)`` physical memory in bytes."""
        ...

    @abstractmethod
    def network(self) -> tuple[int, int]:
        """``(sent, recv)`` cumulative bytes across non-loopback interfaces."""
        ...

    @abstractmethod
    def uptime(self) -> int:
        """Seconds since boot, from a source immune to wall-clock changes."""
        ...

    def disk(self) -> tuple[int, int]:
        """``(used, total)`` bytes of the root filesystem."""
        st = os.statvfs(self.disk_path)
        total = st.f_blocks * st.f_frsize
        free = st.f_bavail * st.f_frsize
        return max(total - free, 0), total

    # ── sample ──────────────────────────────────────────

    def collect(self) -> SystemMetrics:
        fields: dict[str, float | int] = {}

        times = self._measure("cpu", self.cpu_times)
        if times is not None:
            fields["cpu_percent"] = self.sampler.sample(times)

        memory = self._measure("memory", self.memory)
        if memory is not None:
            fields["memory_used"], fields["memory_total"] = memory

        disk = self._measure("disk", self.disk)
        if disk is not None:
            fields["disk_used"], fields["disk_total"] = disk

        network = self._measure("network", self.network)
        if network is not None:
            fields["network_bytes_sent"], fields["network_bytes_recv"] = network

        uptime = self._measure("uptime", self.uptime)
        if uptime is not None:
            fields["uptime_seconds"] = uptime

        return SystemMetrics(**fields)

    def _measure(self, field: str, measure: Callable[[], T]) -> T | None:
        try:
            return measure()
        except FIELD_ERRORS as exc:
            logger.debug("Collector [%s] %s unavailable: %s", self.name, field, exc)
        except Exception:
            logger.exception("Collector [%s] %s failed", self.name, field)
        return None


class UnsupportedCollector:
    """Stand-in for platforms without a metrics backend."""

    name = "unsupported"

    def __init__(self, platform: str) -> None:
        self.platform = platform

    def collect(self) -> SystemMetrics:
        raise CollectorError(f"no metrics backend for platform {self.platform!r}")
