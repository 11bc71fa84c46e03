from __future__ import annotations

import ctypes
import os

import psutil

from nodegate.collectors.base import BaseCollector
from nodegate.models.metrics import CpuTimes

# Win32 widths, spelled out so the module imports on every OS
DWORD = ctypes.c_uint32


class FILETIME(ctypes.Structure):
    _fields_ = [
        ("dwLowDateTime", DWORD),
        ("dwHighDateTime", DWORD),
    ]

    @property
    def value(self) -> int:
        return (self.dwHighDateTime << 32) | self.dwLowDateTime


class MEMORYSTATUSEX(ctypes.Structure):
    _fields_ = [
        ("dwLength", DWORD),
        ("dwMemoryLoad", DWORD),
        ("ullTotalPhys", ctypes.c_ulonglong),
        ("ullAvailPhys", ctypes.c_ulonglong),
        ("ullTotalPageFile", ctypes.c_ulonglong),
        ("ullAvailPageFile", ctypes.c_ulonglong),
        ("ullTotalVirtual", ctypes.c_ulonglong),
        ("ullAvailVirtual", ctypes.c_ulonglong),
        ("ullAvailExtendedVirtual", ctypes.c_ulonglong),
    ]


def _kernel32():
    return ctypes.WinDLL("kernel32", use_last_error=True)


def _last_error(call: str) -> OSError:
    return OSError(ctypes.get_last_error(), f"{call} failed")


# ── system calls ───────────────────────────────────────


def get_system_times() -> tuple[int, int, int]:
    """``(idle, kernel, user)`` in 100ns units. Kernel time includes idle."""
    idle, kernel, user = FILETIME(), FILETIME(), FILETIME()
    if not _kernel32().GetSystemTimes(ctypes.byref(idle), ctypes.byref(kernel), ctypes.byref(user)):
        raise _last_error("GetSystemTimes")
    return idle.value, kernel.value, user.value


def global_memory_status() -> tuple[int, int]:
    """``(total, available)`` physical memory in bytes."""
    status = MEMORYSTATUSEX()
    status.dwLength = ctypes.sizeof(MEMORYSTATUSEX)
    if not _kernel32().GlobalMemoryStatusEx(ctypes.byref(status)):
        raise _last_error("GlobalMemoryStatusEx")
    return status.ullTotalPhys, status.ullAvailPhys


def get_disk_free_space(root: str) -> tuple[int, int]:
    """``(total, total_free)`` bytes for the volume holding ``root``."""
    free_to_caller = ctypes.c_ulonglong()
    total = ctypes.c_ulonglong()
    total_free = ctypes.c_ulonglong()
    if not _kernel32().GetDiskFreeSpaceExW(
        ctypes.c_wchar_p(root),
        ctypes.byref(free_to_caller),
        ctypes.byref(total),
        ctypes.byref(total_free),
    ):
        raise _last_error("GetDiskFreeSpaceExW")
    return total.value, total_free.value


def get_tick_count64() -> int:
    """Milliseconds since boot."""
    func = _kernel32().GetTickCount64
    func.restype = ctypes.c_ulonglong
    ticks = func()
    if not ticks:
        raise OSError("GetTickCount64 returned 0")
    return ticks


def is_loopback_interface(name: str) -> bool:
    lowered = name.lower()
    return lowered == "lo" or "loopback" in lowered


class WindowsCollector(BaseCollector):
    """Queries kernel32 directly; network counters come from psutil."""

    name = "windows"

    def cpu_times(self) -> CpuTimes:
        idle, kernel, user = get_system_times()
        return CpuTimes(user=user, system=max(kernel - idle, 0), idle=idle)

    def memory(self) -> tuple[int, int]:
        total, available = global_memory_status()
        return max(total - available, 0), total

    def disk(self) -> tuple[int, int]:
        root = self.disk_path
        if root in ("/", ""):
            root = os.environ.get("SystemDrive", "C:") + "\\"
        total, total_free = get_disk_free_space(root)
        return max(total - total_free, 0), total

    def network(self) -> tuple[int, int]:
        sent = recv = 0
        for name, counters in psutil.net_io_counters(pernic=True).items():
            if is_loopback_interface(name):
                continue
            sent += counters.bytes_sent
            recv += counters.bytes_recv
        return sent, recv

    def uptime(self) -> int:
        return get_tick_count64() // 1000
