"""Exception hierarchy shared across macsetup."""
from __future__ import annotations

from typing import Optional


class MacSetupError(Exception):
    """Base class for all macsetup errors."""


class ConfigError(MacSetupError):
    """Invalid or missing configuration. Always fatal to the run."""


class StepError(MacSetupError):
    """A step could not reach its desired state.

    The runner records the step as failed with ``reason``; whether the run
    continues depends on the step's ``required`` flag.
    """

    def __init__(self, reason: str, attempts: int = 1) -> None:
        super().__init__(reason)
        self.reason = reason
        self.attempts = attempts


class CommandError(StepError):
    """An external command exited non-zero."""

    def __init__(self, cmd: list[str], returncode: Optional[int], stderr: str = "") -> None:
        tail = stderr.strip().splitlines()[-1] if stderr.strip() else ""
        reason = f"`{' '.join(cmd)}` exited with code {returncode}"
        if tail:
            reason = f"{reason}: {tail}"
        super().__init__(reason)
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr


class DownloadError(StepError):
    """An installer script could not be downloaded."""
