from .base import BaseCollector, CollectorError, MetricUnavailableError, UnsupportedCollector
from .darwin import DarwinCollector
from .linux import LinuxCollector
from .windows import WindowsCollector

__all__ = [
    "BaseCollector",
    "CollectorError",
    "MetricUnavailableError",
    "UnsupportedCollector",
    "DarwinCollector",
    "LinuxCollector",
    "WindowsCollector",
]
