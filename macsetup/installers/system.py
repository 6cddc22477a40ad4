from __future__ import annotations

import platform
from typing import Callable, Optional

from ..config import Prompter
from ..errors import StepError
from ..step import Step, StepResult


def host_system() -> str:
    return platform.system()


def macos_only_message(system: str) -> str:
    return f"macsetup is designed for macOS only (detected {system or 'unknown'})"


class MacOSCheckStep(Step):
    """Refuse to provision anything but macOS. Required: halts the run."""

    name = "macos-check"
    description = "verify the host is running macOS"
    required = True

    def __init__(self, *args, system: Callable[[], str] = host_system, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._system = system

    def is_satisfied(self) -> bool:
        return self._system() == "Darwin"

    def apply(self) -> Optional[StepResult]:
        raise StepError(macos_only_message(self._system()))


class XcodeToolsStep(Step):
    """Install the Xcode Command Line Tools.

    The installer is a GUI dialog, so in interactive mode the step waits for
    the operator to confirm it finished. Non-interactive runs launch the
    dialog and fail the step, asking for a re-run once it completes.
    """

    name = "xcode-tools"
    description = "install the Xcode Command Line Tools"

    def __init__(self, *args, prompter: Optional[Prompter] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.prompter = prompter or Prompter()

    def is_satisfied(self) -> bool:
        return self.shell.probe(["xcode-select", "-p"]).ok

    def apply(self) -> Optional[StepResult]:
        res = self.shell.run(["xcode-select", "--install"])
        if res.returncode == 127:
            raise StepError("xcode-select not found")
        if self.config.non_interactive:
            raise StepError("installer launched; complete the Xcode installation in the popup window and re-run")
        self.prompter.pause("Complete the Xcode installation in the popup window, then press Enter")
        if not self.is_satisfied():
            raise StepError("Xcode Command Line Tools still not detected")
        return StepResult.succeeded()
