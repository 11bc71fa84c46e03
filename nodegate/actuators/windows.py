from __future__ import annotations

import ctypes

from nodegate.actuators.base import BaseActuator, ShutdownAttempt, command_attempt

# Win32 widths, spelled out so the module imports on every OS
DWORD = ctypes.c_uint32
LONG = ctypes.c_int32
HANDLE = ctypes.c_void_p

TOKEN_ADJUST_PRIVILEGES = 0x0020
TOKEN_QUERY = 0x0008
SE_PRIVILEGE_ENABLED = 0x00000002
SE_SHUTDOWN_NAME = "SeShutdownPrivilege"
ERROR_NOT_ALL_ASSIGNED = 1300

EWX_FORCE = 0x00000004
EWX_POWEROFF = 0x00000008

# SHTDN_REASON_MAJOR_OTHER | SHTDN_REASON_MINOR_OTHER | SHTDN_REASON_FLAG_PLANNED
SHUTDOWN_REASON = 0x80000000


class LUID(ctypes.Structure):
    _fields_ = [("LowPart", DWORD), ("HighPart", LONG)]


class LUID_AND_ATTRIBUTES(ctypes.Structure):
    _fields_ = [("Luid", LUID), ("Attributes", DWORD)]


class TOKEN_PRIVILEGES(ctypes.Structure):
    _fields_ = [("PrivilegeCount", DWORD), ("Privileges", LUID_AND_ATTRIBUTES * 1)]


def _last_error(call: str) -> OSError:
    return OSError(ctypes.get_last_error(), f"{call} failed")


def enable_shutdown_privilege() -> None:
    advapi32 = ctypes.WinDLL("advapi32", use_last_error=True)
    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)

    token = HANDLE()
    process = kernel32.GetCurrentProcess()
    if not advapi32.OpenProcessToken(process, TOKEN_ADJUST_PRIVILEGES | TOKEN_QUERY, ctypes.byref(token)):
        raise _last_error("OpenProcessToken")
    try:
        luid = LUID()
        if not advapi32.LookupPrivilegeValueW(None, SE_SHUTDOWN_NAME, ctypes.byref(luid)):
            raise _last_error("LookupPrivilegeValueW")

        privileges = TOKEN_PRIVILEGES()
        privileges.PrivilegeCount = 1
        privileges.Privileges[0].Luid = luid
        privileges.Privileges[0].Attributes = SE_PRIVILEGE_ENABLED
        if not advapi32.AdjustTokenPrivileges(token, False, ctypes.byref(privileges), 0, None, None):
            raise _last_error("AdjustTokenPrivileges")
        if ctypes.get_last_error() == ERROR_NOT_ALL_ASSIGNED:
            raise OSError(ERROR_NOT_ALL_ASSIGNED, f"{SE_SHUTDOWN_NAME} not held")
    finally:
        kernel32.CloseHandle(token)


def exit_windows(force: bool) -> None:
    enable_shutdown_privilege()
    flags = EWX_POWEROFF | (EWX_FORCE if force else 0)
    user32 = ctypes.WinDLL("user32", use_last_error=True)
    if not user32.ExitWindowsEx(flags, SHUTDOWN_REASON):
        raise _last_error("ExitWindowsEx")


def initiate_shutdown(timeout_seconds: int) -> None:
    enable_shutdown_privilege()
    advapi32 = ctypes.WinDLL("advapi32", use_last_error=True)
    if not advapi32.InitiateSystemShutdownExW(
        None,
        "Shutdown requested via nodegate",
        timeout_seconds,
        False,  # let applications save state
        False,  # power off, not reboot
        SHUTDOWN_REASON,
    ):
        raise _last_error("InitiateSystemShutdownExW")


class WindowsActuator(BaseActuator):
    """Win32 shutdown APIs first, ``shutdown.exe`` as the fallback."""

    name = "windows"

    def plan(self, force: bool) -> list[ShutdownAttempt]:
        if force:
            return [
                ShutdownAttempt("ExitWindowsEx(EWX_POWEROFF|EWX_FORCE)", lambda: exit_windows(True)),
                command_attempt(["shutdown", "/s", "/f", "/t", "0"]),
            ]
        grace = self.grace_minutes * 60
        return [
            ShutdownAttempt(f"InitiateSystemShutdownExW({grace}s)", lambda: initiate_shutdown(grace)),
            command_attempt(["shutdown", "/s", "/t", str(grace)]),
        ]
