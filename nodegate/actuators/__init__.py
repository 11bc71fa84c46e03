from .base import BaseActuator, ShutdownAttempt, ShutdownError, UnsupportedActuator
from .darwin import DarwinActuator
from .linux import LinuxActuator
from .windows import WindowsActuator

__all__ = [
    "BaseActuator",
    "ShutdownAttempt",
    "ShutdownError",
    "UnsupportedActuator",
    "DarwinActuator",
    "LinuxActuator",
    "WindowsActuator",
]
