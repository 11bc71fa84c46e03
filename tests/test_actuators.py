"""Tests for nodegate.actuators — delay, primary/fallback ordering, errors."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from nodegate.actuators import (
    DarwinActuator,
    LinuxActuator,
    ShutdownError,
    UnsupportedActuator,
    WindowsActuator,
)
from nodegate.actuators.base import BaseActuator, ShutdownAttempt
from nodegate.commands import CommandError


class RecordingActuator(BaseActuator):
    """Actuator whose attempts append to a shared call log."""

    name = "recording"

    def __init__(self, outcomes: list[Exception | None], delay: float = 0.0) -> None:
        super().__init__(delay=delay, grace_minutes=1)
        self.outcomes = outcomes
        self.calls: list[str] = []

    def plan(self, force: bool) -> list[ShutdownAttempt]:
        attempts = []
        for i, outcome in enumerate(self.outcomes):
            attempts.append(ShutdownAttempt(f"step{i}", self._make_action(f"step{i}", outcome)))
        return attempts

    def _make_action(self, label: str, outcome: Exception | None):
        def action():
            self.calls.append(label)
            if outcome is not None:
                raise outcome

        return action


# ── base behaviour ────────────────────────────────────


class TestBaseActuator:
    def test_primary_success_skips_fallback(self):
        actuator = RecordingActuator([None, None])
        actuator.shutdown(force=True)
        assert actuator.calls == ["step0"]

    def test_fallback_success_is_overall_success(self):
        actuator = RecordingActuator([CommandError(["a"], "exit status 1"), None])
        actuator.shutdown(force=False)
        assert actuator.calls == ["step0", "step1"]

    def test_both_failing_raises_combined_error(self):
        actuator = RecordingActuator([
            CommandError(["primary"], "exit status 1"),
            OSError("fallback missing"),
        ])
        with pytest.raises(ShutdownError) as excinfo:
            actuator.shutdown(force=True)
        message = str(excinfo.value)
        assert "forced" in message
        assert "primary" in message
        assert "fallback missing" in message

    def test_delay_precedes_first_attempt(self):
        actuator = RecordingActuator([None], delay=0.1)
        with patch(
            "nodegate.actuators.base.time.sleep",
            side_effect=lambda s: actuator.calls.append(f"sleep {s}"),
        ):
            actuator.shutdown(force=False)
        assert actuator.calls == ["sleep 0.1", "step0"]

    def test_delay_never_negative(self):
        actuator = RecordingActuator([None], delay=-5)
        with patch("nodegate.actuators.base.time.sleep") as mock_sleep:
            actuator.shutdown(force=True)
        mock_sleep.assert_called_once_with(0.0)

    def test_defaults_from_settings(self):
        actuator = LinuxActuator()
        assert actuator.delay == pytest.approx(0.1)
        assert actuator.grace_minutes == 1


# ── platform plans ────────────────────────────────────


@pytest.fixture
def no_sleep():
    with patch("nodegate.actuators.base.time.sleep"):
        yield


def _argv_calls(mock_run) -> list[list[str]]:
    return [list(call.args[0]) for call in mock_run.call_args_list]


class TestLinuxActuator:
    def test_forced_uses_systemctl_first(self, no_sleep):
        with patch("nodegate.actuators.base.run_command", return_value="") as mock_run:
            LinuxActuator().shutdown(force=True)
        assert _argv_calls(mock_run) == [["systemctl", "poweroff", "-i", "--force"]]

    def test_forced_falls_back_to_shutdown_now(self, no_sleep):
        with patch(
            "nodegate.actuators.base.run_command",
            side_effect=[CommandError(["systemctl"], "failed"), ""],
        ) as mock_run:
            LinuxActuator().shutdown(force=True)
        assert _argv_calls(mock_run) == [
            ["systemctl", "poweroff", "-i", "--force"],
            ["shutdown", "-h", "now"],
        ]

    def test_graceful_schedules_with_grace_window(self, no_sleep):
        with patch(
            "nodegate.actuators.base.run_command",
            side_effect=[CommandError(["shutdown"], "failed"), ""],
        ) as mock_run:
            LinuxActuator(grace_minutes=3).shutdown(force=False)
        assert _argv_calls(mock_run) == [
            ["shutdown", "-h", "+3"],
            ["systemctl", "poweroff"],
        ]

    def test_all_failing_raises(self, no_sleep):
        with patch("nodegate.actuators.base.run_command", side_effect=CommandError(["x"], "nope")):
            with pytest.raises(ShutdownError):
                LinuxActuator().shutdown(force=False)


class TestDarwinActuator:
    def test_forced(self, no_sleep):
        with patch("nodegate.actuators.base.run_command", return_value="") as mock_run:
            DarwinActuator().shutdown(force=True)
        assert _argv_calls(mock_run) == [["sudo", "-n", "shutdown", "-h", "now"]]

    def test_graceful_fallback(self, no_sleep):
        with patch(
            "nodegate.actuators.base.run_command",
            side_effect=[CommandError(["sudo"], "a password is required"), ""],
        ) as mock_run:
            DarwinActuator().shutdown(force=False)
        calls = _argv_calls(mock_run)
        assert calls[0] == ["sudo", "-n", "shutdown", "-h", "+1"]
        assert calls[1][0] == "osascript"


class TestWindowsActuator:
    def test_forced_uses_exit_windows(self, no_sleep):
        with patch("nodegate.actuators.windows.exit_windows") as mock_exit, \
             patch("nodegate.actuators.base.run_command") as mock_run:
            WindowsActuator().shutdown(force=True)
        mock_exit.assert_called_once_with(True)
        mock_run.assert_not_called()

    def test_forced_falls_back_to_shutdown_exe(self, no_sleep):
        with patch("nodegate.actuators.windows.exit_windows", side_effect=OSError(1314, "privilege not held")), \
             patch("nodegate.actuators.base.run_command", return_value="") as mock_run:
            WindowsActuator().shutdown(force=True)
        assert _argv_calls(mock_run) == [["shutdown", "/s", "/f", "/t", "0"]]

    def test_graceful_grace_window(self, no_sleep):
        with patch("nodegate.actuators.windows.initiate_shutdown", side_effect=OSError(5, "denied")) as mock_init, \
             patch("nodegate.actuators.base.run_command", return_value="") as mock_run:
            WindowsActuator(grace_minutes=2).shutdown(force=False)
        mock_init.assert_called_once_with(120)
        assert _argv_calls(mock_run) == [["shutdown", "/s", "/t", "120"]]


def test_unsupported_actuator_raises():
    with pytest.raises(ShutdownError, match="sunos5"):
        UnsupportedActuator("sunos5").shutdown(force=True)
