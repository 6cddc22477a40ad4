from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from ..errors import StepError
from ..fetch import INSTALL_TIMEOUT, POETRY_INSTALLER_URL, Fetcher, fetch_script
from ..retry import RetryPolicy, retry_call
from ..step import Step, StepResult


logger = logging.getLogger(__name__)


class PyenvPythonStep(Step):
    """Install the configured Python version with pyenv and make it global."""

    name = "python"
    description = "install Python with pyenv and set it as the global version"

    def _installed_versions(self) -> set[str]:
        res = self.shell.probe(["pyenv", "versions", "--bare"])
        return {v.strip() for v in res.stdout.splitlines() if v.strip()} if res.ok else set()

    def _global_version(self) -> str:
        res = self.shell.probe(["pyenv", "global"])
        return res.stdout.strip() if res.ok else ""

    def is_satisfied(self) -> bool:
        if not self.shell.which("pyenv"):
            return False
        version = self.config.python_version
        return version in self._installed_versions() and self._global_version() == version

    def apply(self) -> Optional[StepResult]:
        if not self.shell.which("pyenv"):
            raise StepError("pyenv not found on PATH; it is installed by the dev-tools step")
        version = self.config.python_version
        detail = f"Python {version} already installed, set as global"
        if version not in self._installed_versions():
            self.shell.run(["pyenv", "install", version], check=True)
            detail = f"installed Python {version}"
        self.shell.run(["pyenv", "global", version], check=True)
        self.shell.prepend_path(str(self.paths.home / ".pyenv" / "shims"))
        return StepResult.succeeded(detail)


class PoetryStep(Step):
    """Install Poetry with the official installer.

    Downloading and running the installer is retried up to three times with
    a linear backoff (5s, then 10s). When every attempt fails the step fails
    with instructions for a manual install; it is best-effort, so the run
    carries on.

    Each attempt is bounded by ``timeout``; an installer that hangs is killed
    and counts as a failed attempt, so the step waits at most
    attempts x timeout plus the backoff delays.
    """

    name = "poetry"
    description = "install Poetry (retrying on network failures)"

    def __init__(
        self,
        *args,
        fetch: Fetcher = fetch_script,
        policy: RetryPolicy = RetryPolicy(),
        sleep: Callable[[float], None] = time.sleep,
        timeout: float = INSTALL_TIMEOUT,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.fetch = fetch
        self.policy = policy
        self.sleep = sleep
        self.timeout = timeout

    @property
    def _poetry_bin(self):
        return self.paths.local_bin / "poetry"

    def is_satisfied(self) -> bool:
        return bool(self.shell.which("poetry")) or self._poetry_bin.exists()

    def _attempt(self) -> None:
        script = self.fetch(POETRY_INSTALLER_URL)
        python = self.shell.which("python3") or "python3"
        self.shell.run([python, "-"], input=script, timeout=self.timeout, check=True)

    def _on_retry(self, attempt: int, error: StepError, wait: float) -> None:
        logger.warning("Poetry install attempt %d failed: %s (retrying in %.0fs)", attempt, error.reason, wait)

    def apply(self) -> Optional[StepResult]:
        try:
            _, attempts = retry_call(self._attempt, self.policy, sleep=self.sleep, on_retry=self._on_retry)
        except StepError as e:
            raise StepError(
                f"Poetry installation failed after {e.attempts} attempts ({e.reason}); "
                f"install it manually: curl -sSL {POETRY_INSTALLER_URL} | python3 -",
                attempts=e.attempts,
            ) from e
        self.shell.prepend_path(str(self.paths.local_bin))
        return StepResult.succeeded(f"installed after {attempts} attempt(s)", attempts=attempts)
