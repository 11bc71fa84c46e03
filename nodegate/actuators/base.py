from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import NamedTuple

from nodegate.commands import CommandError, run_command
from nodegate.config import settings

logger = logging.getLogger(__name__)


class ShutdownError(Exception):
    """Every shutdown mechanism for the requested mode failed."""


class ShutdownAttempt(NamedTuple):
    label: str
    action: Callable[[], object]


def command_attempt(argv: Sequence[str]) -> ShutdownAttempt:
    argv = list(argv)
    return ShutdownAttempt(" ".join(argv), lambda: run_command(argv))


class BaseActuator(ABC):
    """Abstract base for per-platform shutdown actuators.

    Subclasses return an ordered plan of attempts (primary, then fallbacks).
    ``shutdown()`` waits briefly so the caller's HTTP response can flush, then
    runs the plan until one attempt succeeds.
    """

    name: str = "base"

    def __init__(self, delay: float | None = None, grace_minutes: int | None = None) -> None:
        self.delay = settings.shutdown_delay if delay is None else delay
        self.grace_minutes = settings.graceful_shutdown_minutes if grace_minutes is None else grace_minutes

    @abstractmethod
    def plan(self, force: bool) -> list[ShutdownAttempt]:
        ...

    def shutdown(self, force: bool) -> None:
        time.sleep(max(self.delay, 0.0))

        mode = "forced" if force else "graceful"
        errors: list[str] = []
        for attempt in self.plan(force):
            try:
                attempt.action()
            except (OSError, CommandError) as exc:
                logger.warning("Shutdown [%s] %s failed: %s", self.name, attempt.label, exc)
                errors.append(f"{attempt.label}: {exc}")
                continue
            logger.info("Shutdown [%s] %s issued via %s", self.name, mode, attempt.label)
            return

        raise ShutdownError(f"{mode} shutdown failed: " + "; ".join(errors))


class UnsupportedActuator:
    """Stand-in for platforms without a shutdown backend."""

    name = "unsupported"

    def __init__(self, platform: str) -> None:
        self.platform = platform

    def shutdown(self, force: bool) -> None:
        raise ShutdownError(f"no shutdown backend for platform {self.platform!r}")
