from __future__ import annotations

from pathlib import Path

from nodegate.collectors.base import BaseCollector, MetricUnavailableError
from nodegate.engine.cpu_sampler import CpuSampler
from nodegate.models.metrics import CpuTimes


class LinuxCollector(BaseCollector):
    """Reads the kernel's counter files under ``/proc``."""

    name = "linux"

    def __init__(
        self,
        sampler: CpuSampler | None = None,
        disk_path: str | None = None,
        proc_root: str | Path = "/proc",
    ) -> None:
        super().__init__(sampler, disk_path)
        self.proc_root = Path(proc_root)

    def cpu_times(self) -> CpuTimes:
        with open(self.proc_root / "stat") as f:
            line = f.readline()
        if not line.startswith("cpu "):
            raise MetricUnavailableError("unexpected /proc/stat format")

        fields = line.split()
        if len(fields) < 8:
            raise MetricUnavailableError("insufficient fields in /proc/stat")

        user, nice, system, idle, iowait, irq = (int(v) for v in fields[1:7])
        return CpuTimes(user=user, nice=nice, system=system, idle=idle, iowait=iowait, irq=irq)

    def memory(self) -> tuple[int, int]:
        info: dict[str, int] = {}
        with open(self.proc_root / "meminfo") as f:
            for line in f:
                parts = line.split()
                if len(parts) < 2:
                    continue
                try:
                    info[parts[0].rstrip(":")] = int(parts[1]) * 1024
                except ValueError:
                    continue

        total = info.get("MemTotal", 0)
        if "MemAvailable" in info:
            used = total - info["MemAvailable"]
        else:
            # Kernels before 3.14 have no MemAvailable.
            used = total - info.get("MemFree", 0) - info.get("Buffers", 0) - info.get("Cached", 0)
        return max(used, 0), total

    def network(self) -> tuple[int, int]:
        sent = recv = 0
        with open(self.proc_root / "net" / "dev") as f:
            lines = f.readlines()[2:]  # two header lines

        for line in lines:
            iface, sep, counters = line.partition(":")
            if not sep or iface.strip() == "lo":
                continue
            fields = counters.split()
            if len(fields) < 9:
                continue
            # receive bytes is column 0, transmit bytes column 8
            try:
                recv += int(fields[0])
                sent += int(fields[8])
            except ValueError:
                continue
        return sent, recv

    def uptime(self) -> int:
        with open(self.proc_root / "uptime") as f:
            fields = f.read().split()
        if not fields:
            raise MetricUnavailableError("unexpected /proc/uptime format")
        return int(float(fields[0]))
