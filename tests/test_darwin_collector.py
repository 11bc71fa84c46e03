"""Tests for nodegate.collectors.darwin — parsers and command wiring."""

from __future__ import annotations

import textwrap
from collections import namedtuple
from unittest.mock import patch

import psutil
import pytest

from nodegate.collectors.base import MetricUnavailableError
from nodegate.collectors.darwin import (
    DarwinCollector,
    parse_boottime,
    parse_netstat,
    parse_vm_stat,
)
from nodegate.commands import CommandError
from nodegate.engine.cpu_sampler import CpuSampler

CpuTimesTuple = namedtuple("scputimes", ["user", "nice", "system", "idle"])

VM_STAT = textwrap.dedent(
    """\
    Mach Virtual Memory Statistics: (page size of 16384 bytes)
    Pages free:                                3000.
    Pages active:                            100000.
    Pages inactive:                           50000.
    Pages speculative:                        10000.
    Pages throttled:                              0.
    Pages wired down:                         40000.
    Pages purgeable:                           1200.
    """
)

NETSTAT = textwrap.dedent(
    """\
    Name       Mtu   Network       Address            Ipkts Ierrs     Ibytes    Opkts Oerrs     Obytes  Coll
    lo0        16384 <Link#1>                        10000     0    9000000    10000     0    9000000     0
    lo0        16384 127           127.0.0.1         10000     -    9000000    10000     -    9000000     -
    en0        1500  <Link#4>    a4:83:e7:11:22:33  200000     0  150000000   100000     0   20000000     0
    en0        1500  192.168.1     192.168.1.20      200000     -  150000000   100000     -   20000000     -
    utun3      1280  <Link#12>                         500     0      40000      600     0      50000     0
    utun3      1280  100.100.1.1   100.100.1.1         500     -      40000      600     -      50000     -
    """
)

BOOTTIME = "{ sec = 1707948123, usec = 456789 } Thu Feb 15 12:15:23 2024\n"


# ── parsers ───────────────────────────────────────────


class TestParsers:
    def test_vm_stat_used_bytes(self):
        assert parse_vm_stat(VM_STAT) == (100000 + 40000 + 50000 - 10000) * 16384

    def test_vm_stat_default_page_size(self):
        assert parse_vm_stat("Pages active: 10.\n") == 10 * 4096

    def test_vm_stat_never_negative(self):
        assert parse_vm_stat("Pages speculative: 10.\n") == 0

    def test_netstat_counts_link_rows_once(self):
        sent, recv = parse_netstat(NETSTAT)
        assert recv == 150000000 + 40000
        assert sent == 20000000 + 50000

    def test_netstat_empty(self):
        assert parse_netstat("") == (0, 0)

    def test_boottime(self):
        assert parse_boottime(BOOTTIME) == 1707948123

    def test_boottime_unparseable(self):
        with pytest.raises(MetricUnavailableError):
            parse_boottime("garbage")


# ── collector ─────────────────────────────────────────


def _fake_commands(outputs: dict[str, str]):
    def run(argv, timeout=None):
        key = " ".join(argv)
        if key not in outputs:
            raise CommandError(argv, "command not found")
        return outputs[key]

    return run


@pytest.fixture
def commands():
    outputs = {
        "sysctl -n hw.memsize": "17179869184\n",
        "vm_stat": VM_STAT,
        "netstat -ibn": NETSTAT,
        "sysctl -n kern.boottime": BOOTTIME,
    }
    with patch("nodegate.collectors.darwin.run_command", side_effect=_fake_commands(outputs)) as mock_run:
        yield mock_run


@pytest.fixture
def collector():
    return DarwinCollector(sampler=CpuSampler())


class TestDarwinCollector:
    def test_memory(self, collector, commands):
        used, total = collector.memory()
        assert total == 17179869184
        assert used == (100000 + 40000 + 50000 - 10000) * 16384

    def test_network(self, collector, commands):
        assert collector.network() == (20000000 + 50000, 150000000 + 40000)

    def test_cpu_uses_psutil_ticks(self, collector):
        with patch("nodegate.collectors.darwin.psutil") as mock_psutil:
            mock_psutil.cpu_times.return_value = CpuTimesTuple(10.0, 0.0, 5.0, 85.0)
            times = collector.cpu_times()
        assert times.user == 1000
        assert times.system == 500
        assert times.idle == 8500

    def test_cpu_delta_across_collects(self, collector, commands):
        with patch("nodegate.collectors.darwin.psutil") as mock_psutil:
            mock_psutil.cpu_times.return_value = CpuTimesTuple(10.0, 0.0, 0.0, 10.0)
            assert collector.collect().cpu_percent == 0.0
            mock_psutil.cpu_times.return_value = CpuTimesTuple(10.5, 0.0, 0.0, 10.5)
            assert collector.collect().cpu_percent == pytest.approx(50.0)

    def test_uptime_from_monotonic_clock(self, collector):
        with patch("nodegate.collectors.darwin.time.clock_gettime", return_value=3600.9):
            assert collector.uptime() == 3600

    def test_uptime_falls_back_to_boottime(self, collector, commands):
        with patch("nodegate.collectors.darwin.time.clock_gettime", side_effect=OSError("unsupported")), \
             patch("nodegate.collectors.darwin.time.time", return_value=1707948123 + 120.5):
            assert collector.uptime() == 120

    def test_missing_commands_degrade_fields(self, collector):
        with patch("nodegate.collectors.darwin.run_command", side_effect=CommandError(["vm_stat"], "timed out")), \
             patch("nodegate.collectors.darwin.psutil") as mock_psutil, \
             patch("nodegate.collectors.darwin.time.clock_gettime", return_value=42.0):
            mock_psutil.cpu_times.return_value = CpuTimesTuple(1.0, 0.0, 1.0, 1.0)
            metrics = collector.collect()
        assert metrics.memory_total == 0
        assert metrics.memory_used == 0
        assert metrics.network_bytes_sent == 0
        assert metrics.uptime_seconds == 42

    def test_psutil_access_denied_degrades_cpu(self, collector, commands):
        with patch(
            "nodegate.collectors.darwin.psutil.cpu_times",
            side_effect=psutil.AccessDenied(),
        ), patch("nodegate.collectors.darwin.time.clock_gettime", return_value=42.0):
            metrics = collector.collect()
        assert metrics.cpu_percent == 0.0
        assert metrics.memory_total == 17179869184
        assert metrics.uptime_seconds == 42
