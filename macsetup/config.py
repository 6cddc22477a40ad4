"""Run configuration: defaults, config file, prompts and CLI flags."""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import typer
import yaml

from .errors import ConfigError
from .paths import HomePaths


RECOMMENDED_PYTHON_VERSION = "3.12.11"

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+$")


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def is_valid_name(name: str) -> bool:
    return bool((name or "").strip())


def is_valid_python_version(version: str) -> bool:
    return bool(VERSION_PATTERN.match(version or ""))


@dataclass(frozen=True)
class RunConfig:
    """Resolved, immutable settings for a single run."""

    name: str
    email: str
    python_version: str = RECOMMENDED_PYTHON_VERSION
    work_tools: bool = False
    dry_run: bool = False
    non_interactive: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class UserConfig:
    """YAML config file (``~/.macsetup.yaml``) supplying per-user defaults.

    Recognised keys: ``name``, ``email``, ``python_version``, ``work_tools``.
    Values here rank below interactive answers and CLI flags.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self.config_path = Path(config_path) if config_path else HomePaths.current().config_file
        self._data: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        if not self.config_path.exists():
            self._data = {}
            return
        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")
        self._data = data

    def save(self) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                yaml.dump(self._data, f, default_flow_style=False)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {self.config_path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_typed(self, key: str, expected: type, default: Any = None) -> Any:
        """Like get, but a value of the wrong YAML type is a ConfigError."""
        value = self._data.get(key)
        if value is None:
            return default
        if not isinstance(value, expected):
            raise ConfigError(
                f"'{key}' in {self.config_path} must be a {expected.__name__}, got {type(value).__name__} {value!r}"
            )
        return value

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remember(self, config: RunConfig) -> None:
        """Store the identity and preferences of a resolved run."""
        self.set("name", config.name)
        self.set("email", config.email)
        self.set("python_version", config.python_version)
        self.set("work_tools", config.work_tools)


class Prompter:
    """Terminal prompts; replaced by a scripted double in tests."""

    def text(self, message: str, default: Optional[str] = None) -> str:
        return typer.prompt(message, default=default or None, show_default=bool(default))

    def confirm(self, message: str, default: bool = False) -> bool:
        return typer.confirm(message, default=default)

    def pause(self, message: str) -> None:
        typer.prompt(message, default="", show_default=False)

    def error(self, message: str) -> None:
        typer.secho(f"ERROR: {message}", fg=typer.colors.RED, err=True)


def _ask_until_valid(
    prompter: Prompter,
    message: str,
    default: Optional[str],
    valid: Callable[[str], bool],
    complaint: str,
) -> str:
    while True:
        answer = (prompter.text(message, default) or "").strip()
        if valid(answer):
            return answer
        prompter.error(complaint)


def resolve_config(
    name: Optional[str] = None,
    email: Optional[str] = None,
    python_version: Optional[str] = None,
    work_tools: Optional[bool] = None,
    dry_run: bool = False,
    non_interactive: bool = False,
    user_config: Optional[UserConfig] = None,
    prompter: Optional[Prompter] = None,
) -> RunConfig:
    """Build the RunConfig for a run.

    Precedence per field: explicit flag > interactive answer > config file >
    built-in default. Explicit values are validated and rejected with
    ConfigError; interactive answers are re-asked until valid. In
    non-interactive mode name and email must come from flags or the config
    file.
    """
    def stored(key: str, expected: type, default: Any = None) -> Any:
        return user_config.get_typed(key, expected, default) if user_config else default

    interactive = not non_interactive
    prompter = prompter or Prompter()

    if name is not None:
        if not is_valid_name(name):
            raise ConfigError("Name must not be empty")
        name = name.strip()
    elif interactive:
        name = _ask_until_valid(prompter, "Enter your full name for Git", stored("name", str), is_valid_name, "Name must not be empty")
    else:
        name = stored("name", str)
        if not name or not is_valid_name(name):
            raise ConfigError("--name is required in non-interactive mode")

    if email is not None:
        if not is_valid_email(email):
            raise ConfigError(f"Invalid email address: {email!r}")
    elif interactive:
        email = _ask_until_valid(
            prompter, "Enter your email address", stored("email", str), is_valid_email, "Please enter a valid email address"
        )
    else:
        email = stored("email", str)
        if not email:
            raise ConfigError("--email is required in non-interactive mode")
        if not is_valid_email(email):
            raise ConfigError(f"Invalid email address in config file: {email!r}")

    if python_version is None:
        python_version = stored("python_version", str, RECOMMENDED_PYTHON_VERSION)
    if not is_valid_python_version(python_version):
        raise ConfigError(f"Invalid Python version {python_version!r}; expected X.Y.Z")

    if work_tools is None:
        default_work = stored("work_tools", bool, False)
        if interactive:
            work_tools = prompter.confirm("Install work tools (1Password, Slack, Zoom, etc.)?", default=default_work)
        else:
            work_tools = default_work

    if not dry_run and interactive:
        dry_run = prompter.confirm("Run in dry-run mode (show what would be done without making changes)?", default=False)

    return RunConfig(
        name=name,
        email=email,
        python_version=python_version,
        work_tools=bool(work_tools),
        dry_run=bool(dry_run),
        non_interactive=non_interactive,
    )
