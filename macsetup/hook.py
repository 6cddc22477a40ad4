from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING, Any, Optional

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from .runner import RunReport
    from .step import Step, StepResult


class Hook(ABC):
    """Observer of a provisioning run with no-op defaults.

    The runner treats hooks as best-effort: an exception raised by a hook is
    logged and never changes a step's outcome.
    """

    def on_run_start(self, config: Any, steps: list["Step"]) -> None:  # noqa: D401
        return None

    def on_step_start(self, step: "Step") -> None:  # noqa: D401
        return None

    def on_step_end(self, step: "Step", result: "StepResult") -> None:  # noqa: D401
        return None

    def on_run_end(self, report: "RunReport") -> None:  # noqa: D401
        return None


class ConsoleHook(Hook):
    """Coloured INFO/SUCCESS/WARNING/ERROR progress lines on the terminal."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def info(self, message: str) -> None:
        self.console.print(f"[blue]INFO:[/blue] {escape(message)}", highlight=False)

    def success(self, message: str) -> None:
        self.console.print(f"[green]SUCCESS:[/green] {escape(message)}", highlight=False)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]WARNING:[/yellow] {escape(message)}", highlight=False)

    def error(self, message: str) -> None:
        self.console.print(f"[red]ERROR:[/red] {escape(message)}", highlight=False)

    def on_run_start(self, config: Any, steps: list["Step"]) -> None:
        mode = " (dry run, no changes will be made)" if getattr(config, "dry_run", False) else ""
        self.info(f"Starting automated setup: {len(steps)} steps{mode}")

    def on_step_start(self, step: "Step") -> None:
        self.info(f"{step.name}: {step.description}")

    def on_step_end(self, step: "Step", result: "StepResult") -> None:
        from .step import StepStatus

        detail = f" ({result.detail})" if result.detail else ""
        if result.status is StepStatus.SUCCEEDED:
            self.success(f"{step.name}{detail}")
        elif result.status is StepStatus.NOOP:
            self.success(f"{step.name}: already satisfied")
        elif result.status is StepStatus.SKIPPED:
            self.info(f"{step.name}: skipped{detail}")
        elif step.required:
            self.error(f"{step.name} failed: {result.detail}")
        else:
            self.warning(f"{step.name} failed, continuing: {result.detail}")

    def on_run_end(self, report: "RunReport") -> None:
        if report.halted_by:
            self.error(f"Setup halted: required step '{report.halted_by}' failed")
        elif report.failed:
            self.warning(f"Automated setup finished with {len(report.failed)} failed step(s)")
        else:
            self.success("Automated setup completed!")
