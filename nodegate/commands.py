"""Bounded execution of external helper commands.

Platform backends treat every command as a fallible collaborator: it may be
missing, hang, or exit non-zero. All of those surface as ``CommandError``.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

from nodegate.config import settings

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """An external command could not be run to successful completion."""

    def __init__(self, argv: Sequence[str], message: str) -> None:
        self.argv = list(argv)
        super().__init__(f"{' '.join(self.argv)}: {message}")


def run_command(argv: Sequence[str], timeout: float | None = None) -> str:
    """Run ``argv`` and return its stdout. Raises ``CommandError`` on failure."""
    if timeout is None:
        timeout = settings.command_timeout
    try:
        result = subprocess.run(
            list(argv),
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        raise CommandError(argv, "command not found") from exc
    except subprocess.TimeoutExpired as exc:
        raise CommandError(argv, f"timed out after {timeout}s") from exc
    except OSError as exc:
        raise CommandError(argv, str(exc)) from exc

    if result.returncode != 0:
        detail = result.stderr.strip() or f"exit status {result.returncode}"
        raise CommandError(argv, detail)
    logger.debug("Command %s succeeded", argv[0])
    return result.stdout
