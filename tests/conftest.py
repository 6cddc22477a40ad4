"""Pytest configuration and fixtures for macsetup tests"""
import tempfile
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

import pytest

from macsetup.config import Prompter, RunConfig
from macsetup.errors import StepError
from macsetup.paths import HomePaths
from macsetup.shell import CommandResult, Shell
from macsetup.step import Step


Response = Union[CommandResult, Callable[[list, Optional[str]], CommandResult]]


def ok(stdout: str = "") -> Callable[[list, Optional[str]], CommandResult]:
    return lambda cmd, input=None: CommandResult(cmd, 0, stdout)


def fail(returncode: int = 1, stderr: str = "boom") -> Callable[[list, Optional[str]], CommandResult]:
    return lambda cmd, input=None: CommandResult(cmd, returncode, "", stderr)


class FakeShell(Shell):
    """Shell double: never spawns processes, records every command.

    ``tools`` are the executables ``which`` can find. ``responses`` maps a
    command prefix (tuple) to a result or a callable ``(cmd, input)``; the
    longest matching prefix wins and unmatched commands succeed silently.
    """

    def __init__(self, tools=(), responses: Optional[Dict[Tuple[str, ...], Response]] = None) -> None:
        super().__init__(env={"PATH": "/usr/bin"})
        self.tools = set(tools)
        self.responses = dict(responses or {})
        self.runs: list = []
        self.probes: list = []
        self.inputs: list = []
        self.envs: list = []
        self.timeouts: list = []

    def which(self, name: str) -> Optional[str]:
        return f"/fake/bin/{name}" if name in self.tools else None

    def _respond(self, cmd: list, input: Optional[str] = None) -> CommandResult:
        for n in range(len(cmd), 0, -1):
            response = self.responses.get(tuple(cmd[:n]))
            if response is not None:
                return response(cmd, input) if callable(response) else response
        return CommandResult(cmd, 0)

    def probe(self, cmd):
        self.probes.append(list(cmd))
        return self._respond(cmd)

    def run(self, cmd, input=None, env=None, timeout=None, check=False):
        self.runs.append(list(cmd))
        self.inputs.append(input)
        self.envs.append(env)
        self.timeouts.append(timeout)
        result = self._respond(cmd, input)
        if check:
            result.check()
        return result


class ScriptedPrompter(Prompter):
    """Answers prompts from queues instead of the terminal."""

    def __init__(self, texts=(), confirms=()) -> None:
        self.texts = list(texts)
        self.confirms = list(confirms)
        self.asked: list = []
        self.errors: list = []
        self.pauses: list = []

    def text(self, message, default=None):
        self.asked.append(message)
        return self.texts.pop(0)

    def confirm(self, message, default=False):
        self.asked.append(message)
        return self.confirms.pop(0) if self.confirms else default

    def pause(self, message):
        self.pauses.append(message)

    def error(self, message):
        self.errors.append(message)


class RecordingStep(Step):
    """In-memory step whose state flips to satisfied once applied."""

    def __init__(self, config, name, required=False, satisfied=False, fail_with=None, raise_exc=None, log=None):
        super().__init__(config, shell=FakeShell(), paths=HomePaths(Path("/nonexistent")))
        self.name = name
        self.description = f"do {name}"
        self.required = required
        self.satisfied = satisfied
        self.fail_with = fail_with
        self.raise_exc = raise_exc
        self.log = log if log is not None else []
        self.applied = 0

    def is_satisfied(self) -> bool:
        self.log.append(("check", self.name))
        return self.satisfied

    def apply(self):
        self.log.append(("apply", self.name))
        self.applied += 1
        if self.raise_exc:
            raise self.raise_exc
        if self.fail_with:
            raise StepError(self.fail_with)
        self.satisfied = True
        return None


@pytest.fixture
def temp_dir():
    """Provide a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def home(temp_dir):
    """HomePaths rooted in an empty temporary home directory"""
    root = temp_dir / "home"
    root.mkdir()
    return HomePaths(root)


@pytest.fixture
def config():
    return RunConfig(name="Ada Lovelace", email="ada@example.com", non_interactive=True)


@pytest.fixture
def dry_config():
    return RunConfig(name="Ada Lovelace", email="ada@example.com", non_interactive=True, dry_run=True)
