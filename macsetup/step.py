from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .config import RunConfig
from .errors import StepError
from .paths import HomePaths
from .shell import Shell


class StepStatus(str, Enum):
    SUCCEEDED = "succeeded"
    NOOP = "noop"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class StepResult:
    """Outcome of a single step."""

    status: StepStatus
    detail: str = ""
    attempts: int = 0
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is not StepStatus.FAILED

    @classmethod
    def succeeded(cls, detail: str = "", attempts: int = 1) -> "StepResult":
        return cls(StepStatus.SUCCEEDED, detail, attempts)

    @classmethod
    def noop(cls, detail: str = "already satisfied") -> "StepResult":
        return cls(StepStatus.NOOP, detail)

    @classmethod
    def skipped(cls, detail: str) -> "StepResult":
        return cls(StepStatus.SKIPPED, detail)

    @classmethod
    def failed(cls, reason: str, attempts: int = 1) -> "StepResult":
        return cls(StepStatus.FAILED, reason, attempts)


class Step(ABC):
    """A named, idempotent unit of provisioning work.

    Subclasses implement ``is_satisfied`` (a read-only probe of the machine)
    and ``apply`` (the change itself). ``apply`` signals failure by raising
    ``StepError``; it may return a ``StepResult`` to report a custom detail or
    attempt count, otherwise success is assumed.
    """

    name: str = ""
    description: str = ""
    required: bool = False

    def __init__(self, config: RunConfig, shell: Optional[Shell] = None, paths: Optional[HomePaths] = None) -> None:
        self.config = config
        self.shell = shell or Shell()
        self.paths = paths or HomePaths.current()

    def enabled(self) -> bool:
        """Whether the step is active under the current configuration."""
        return True

    @abstractmethod
    def is_satisfied(self) -> bool:
        """Return True when the desired end state already exists."""

    @abstractmethod
    def apply(self) -> Optional[StepResult]:
        """Bring the machine to the desired end state."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, required={self.required})"


class PackageStep(Step):
    """Install a set of packages one at a time, skipping those present.

    Subclasses provide ``packages``, ``installed()`` and ``install_one()``.
    Every missing package is attempted even if an earlier one fails; the
    step fails afterwards with the list of packages that did not install.
    """

    packages: tuple[str, ...] = ()

    @abstractmethod
    def installed(self) -> set[str]:
        """Names of packages already present."""

    @abstractmethod
    def install_one(self, package: str) -> None:
        """Install a single package, raising StepError on failure."""

    def missing(self) -> list[str]:
        have = {p.lower() for p in self.installed()}
        return [p for p in self.packages if p.lower() not in have]

    def is_satisfied(self) -> bool:
        return not self.missing()

    def apply(self) -> Optional[StepResult]:
        failures: list[str] = []
        installed: list[str] = []
        for package in self.missing():
            try:
                self.install_one(package)
                installed.append(package)
            except StepError as e:
                failures.append(f"{package} ({e.reason})")
        if failures:
            raise StepError("failed to install: " + ", ".join(failures))
        return StepResult.succeeded("installed " + ", ".join(installed) if installed else "")
