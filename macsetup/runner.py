from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .config import RunConfig
from .data import Data
from .errors import StepError
from .hook import Hook
from .step import Step, StepResult, StepStatus


logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Append-only record of a run, one entry per step in declaration order."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    entries: List[Tuple[str, StepResult]] = field(default_factory=list)
    halted_by: Optional[str] = None

    def add(self, name: str, result: StepResult) -> None:
        self.entries.append((name, result))

    def result(self, name: str) -> StepResult:
        for entry_name, result in self.entries:
            if entry_name == name:
                return result
        raise KeyError(name)

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self.entries]

    @property
    def counts(self) -> Dict[StepStatus, int]:
        counts = {status: 0 for status in StepStatus}
        for _, result in self.entries:
            counts[result.status] += 1
        return counts

    @property
    def failed(self) -> List[str]:
        return [name for name, result in self.entries if result.status is StepStatus.FAILED]

    @property
    def status(self) -> str:
        if self.halted_by:
            return "halted"
        return "partial" if self.failed else "success"

    @property
    def exit_code(self) -> int:
        return 1 if self.halted_by else 0


class Runner:
    """Sequential provisioning runner.

    For each step, in order: disabled steps and every step of a dry run are
    recorded as skipped; a satisfied idempotency check is recorded as a
    no-op; otherwise the step is applied. A failed best-effort step is
    recorded and the run continues; a failed required step halts the run and
    the remaining steps are recorded as skipped without being touched.
    """

    def __init__(
        self,
        config: RunConfig,
        steps: List[Step],
        hook: Optional[Hook] = None,
        data: Optional[Data] = None,
    ) -> None:
        names = [s.name for s in steps]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate step names: {', '.join(duplicates)}")
        self.config = config
        self.steps = list(steps)
        self.hook = hook or Hook()
        self.data = data

    def execute(self) -> RunReport:
        report = RunReport()
        self._notify("on_run_start", self.config, self.steps)
        self._record_start(report)
        for position, step in enumerate(self.steps):
            if report.halted_by:
                result = StepResult.skipped(f"not run: halted after required step '{report.halted_by}' failed")
            else:
                self._notify("on_step_start", step)
                start = time.time()
                result = self._run_step(step)
                result.duration = time.time() - start
                self._notify("on_step_end", step, result)
                if result.status is StepStatus.FAILED and step.required:
                    report.halted_by = step.name
            report.add(step.name, result)
            self._record_step(report, position, step.name, result)
        self._record_end(report)
        self._notify("on_run_end", report)
        return report

    def _run_step(self, step: Step) -> StepResult:
        try:
            if not step.enabled():
                return StepResult.skipped("disabled by configuration")
            if self.config.dry_run:
                if step.is_satisfied():
                    return StepResult.skipped("dry run: already satisfied")
                return StepResult.skipped(f"dry run: would {step.description}")
            if step.is_satisfied():
                return StepResult.noop()
            outcome = step.apply()
            return outcome if outcome is not None else StepResult.succeeded()
        except StepError as e:
            return StepResult.failed(e.reason, attempts=e.attempts)
        except Exception as e:  # noqa: BLE001
            logger.debug("step %s raised", step.name, exc_info=True)
            return StepResult.failed(f"{type(e).__name__}: {e}")

    def _notify(self, event: str, *args) -> None:
        try:
            getattr(self.hook, event)(*args)
        except Exception:  # noqa: BLE001
            logger.warning("hook %s failed", event, exc_info=True)

    # History (skipped for dry runs, which must leave no trace)
    def _recording(self) -> bool:
        return self.data is not None and not self.config.dry_run

    def _record_start(self, report: RunReport) -> None:
        if self._recording():
            self.data.start_run(report.run_id, self.config.to_dict())

    def _record_step(self, report: RunReport, position: int, name: str, result: StepResult) -> None:
        if self._recording():
            self.data.record_step(report.run_id, position, name, result)

    def _record_end(self, report: RunReport) -> None:
        if self._recording():
            self.data.finish_run(report.run_id, report.status, report.halted_by)
