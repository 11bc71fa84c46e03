from __future__ import annotations

import logging
import re
import time

import psutil

from nodegate.collectors.base import BaseCollector, MetricUnavailableError
from nodegate.commands import run_command
from nodegate.models.metrics import CpuTimes

logger = logging.getLogger(__name__)

_PAGE_SIZE_RE = re.compile(r"page size of (\d+) bytes")
_BOOTTIME_RE = re.compile(r"\bsec = (\d+)")

DEFAULT_PAGE_SIZE = 4096


def parse_vm_stat(output: str) -> int:
    """Bytes in use from ``vm_stat``: active + wired + inactive - speculative."""
    page_size = DEFAULT_PAGE_SIZE
    pages: dict[str, int] = {}
    for line in output.splitlines():
        match = _PAGE_SIZE_RE.search(line)
        if match:
            page_size = int(match.group(1))
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        try:
            pages[key.strip()] = int(value.strip().rstrip("."))
        except ValueError:
            continue

    used_pages = (
        pages.get("Pages active", 0)
        + pages.get("Pages wired down", 0)
        + pages.get("Pages inactive", 0)
        - pages.get("Pages speculative", 0)
    )
    return max(used_pages, 0) * page_size


def parse_netstat(output: str) -> tuple[int, int]:
    """Sum ``(sent, recv)`` bytes from ``netstat -ibn``.

    Each interface appears once per address; only the ``<Link#N>`` row is
    counted. The byte columns are read from the right because the Address
    column is blank for interfaces without a hardware address.
    """
    sent = recv = 0
    for line in output.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 10 or not fields[2].startswith("<Link#"):
            continue
        if fields[0].startswith("lo"):
            continue
        try:
            recv += int(fields[-5])
            sent += int(fields[-2])
        except ValueError:
            continue
    return sent, recv


def parse_boottime(output: str) -> int:
    """Boot time (epoch seconds) from ``sysctl -n kern.boottime``."""
    match = _BOOTTIME_RE.search(output)
    if not match:
        raise MetricUnavailableError("could not parse kern.boottime")
    return int(match.group(1))


class DarwinCollector(BaseCollector):
    """Parses the output of the stock macOS admin tools."""

    name = "darwin"

    def cpu_times(self) -> CpuTimes:
        t = psutil.cpu_times()
        return CpuTimes(
            user=int(t.user * 100),
            nice=int(t.nice * 100),
            system=int(t.system * 100),
            idle=int(t.idle * 100),
        )

    def memory(self) -> tuple[int, int]:
        total = int(run_command(["sysctl", "-n", "hw.memsize"]).strip())
        used = parse_vm_stat(run_command(["vm_stat"]))
        return min(used, total), total

    def network(self) -> tuple[int, int]:
        return parse_netstat(run_command(["netstat", "-ibn"]))

    def uptime(self) -> int:
        # CLOCK_MONOTONIC on macOS counts from boot and keeps running in sleep.
        clock = getattr(time, "CLOCK_MONOTONIC", None)
        if clock is not None:
            try:
                return int(time.clock_gettime(clock))
            except OSError as exc:
                logger.debug("Monotonic clock unavailable, using kern.boottime: %s", exc)
        boot = parse_boottime(run_command(["sysctl", "-n", "kern.boottime"]))
        return max(int(time.time()) - boot, 0)
