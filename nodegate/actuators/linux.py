from __future__ import annotations

from nodegate.actuators.base import BaseActuator, ShutdownAttempt, command_attempt


class LinuxActuator(BaseActuator):
    """systemd first for forced power-off, SysV ``shutdown`` first for graceful."""

    name = "linux"

    def plan(self, force: bool) -> list[ShutdownAttempt]:
        if force:
            return [
                command_attempt(["systemctl", "poweroff", "-i", "--force"]),
                command_attempt(["shutdown", "-h", "now"]),
            ]
        return [
            command_attempt(["shutdown", "-h", f"+{self.grace_minutes}"]),
            command_attempt(["systemctl", "poweroff"]),
        ]
