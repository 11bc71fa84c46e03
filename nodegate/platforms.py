"""Selects the metrics collector and shutdown actuator for the running OS."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Protocol

from nodegate.actuators import DarwinActuator, LinuxActuator, UnsupportedActuator, WindowsActuator
from nodegate.collectors import DarwinCollector, LinuxCollector, UnsupportedCollector, WindowsCollector
from nodegate.engine.cpu_sampler import CpuSampler
from nodegate.models.metrics import SystemMetrics

logger = logging.getLogger(__name__)


class Collector(Protocol):
    name: str

    def collect(self) -> SystemMetrics: ...


class Actuator(Protocol):
    name: str

    def shutdown(self, force: bool) -> None: ...


@dataclass
class PlatformBackend:
    platform: str
    collector: Collector
    actuator: Actuator

    def collect(self) -> SystemMetrics:
        return self.collector.collect()

    def shutdown(self, force: bool) -> None:
        self.actuator.shutdown(force)


_BACKENDS = {
    "linux": (LinuxCollector, LinuxActuator),
    "darwin": (DarwinCollector, DarwinActuator),
    "win32": (WindowsCollector, WindowsActuator),
}


def platform_key(platform: str) -> str:
    if platform.startswith("linux"):
        return "linux"
    return platform


def select_backend(platform: str | None = None, sampler: CpuSampler | None = None) -> PlatformBackend:
    platform = platform_key(platform or sys.platform)
    try:
        collector_cls, actuator_cls = _BACKENDS[platform]
    except KeyError:
        logger.warning("No platform backend for %r; metrics and shutdown are disabled", platform)
        return PlatformBackend(platform, UnsupportedCollector(platform), UnsupportedActuator(platform))

    sampler = sampler if sampler is not None else CpuSampler()
    return PlatformBackend(platform, collector_cls(sampler=sampler), actuator_cls())
