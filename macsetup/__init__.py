"""
macsetup: idempotent macOS developer-machine provisioning.

This package provides:
- RunConfig: immutable run settings resolved from flags, prompts, a YAML file and defaults.
- Step: base class for named, idempotent provisioning steps (installers live in macsetup.installers).
- Runner: sequential runner producing a RunReport; best-effort steps may fail, required steps halt.
- Shell: external command execution with a run-local PATH.
- RetryPolicy / retry_call: bounded linear-backoff retry for network installs.
- SqliteData: optional history of runs and step results.
"""

from .config import RunConfig, UserConfig, Prompter, resolve_config, is_valid_email, RECOMMENDED_PYTHON_VERSION
from .errors import MacSetupError, ConfigError, StepError, CommandError, DownloadError
from .shell import Shell, CommandResult
from .step import Step, PackageStep, StepResult, StepStatus
from .retry import RetryPolicy, retry_call
from .runner import Runner, RunReport
from .hook import Hook, ConsoleHook
from .data import Data, SqliteData
from .paths import HomePaths
from .plan import default_steps

__all__ = [
    "RunConfig",
    "UserConfig",
    "Prompter",
    "resolve_config",
    "is_valid_email",
    "RECOMMENDED_PYTHON_VERSION",
    # Errors
    "MacSetupError",
    "ConfigError",
    "StepError",
    "CommandError",
    "DownloadError",
    # Execution
    "Shell",
    "CommandResult",
    "Step",
    "PackageStep",
    "StepResult",
    "StepStatus",
    "RetryPolicy",
    "retry_call",
    "Runner",
    "RunReport",
    "Hook",
    "ConsoleHook",
    # History
    "Data",
    "SqliteData",
    "HomePaths",
    "default_steps",
]
