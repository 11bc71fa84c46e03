from __future__ import annotations

from nodegate.actuators.base import BaseActuator, ShutdownAttempt, command_attempt

# ``-n`` makes sudo fail instead of waiting for a password prompt.
SUDO = ["sudo", "-n"]


class DarwinActuator(BaseActuator):
    name = "darwin"

    def plan(self, force: bool) -> list[ShutdownAttempt]:
        if force:
            return [
                command_attempt([*SUDO, "shutdown", "-h", "now"]),
                command_attempt([*SUDO, "halt"]),
            ]
        return [
            command_attempt([*SUDO, "shutdown", "-h", f"+{self.grace_minutes}"]),
            command_attempt(["osascript", "-e", 'tell application "System Events" to shut down']),
        ]
