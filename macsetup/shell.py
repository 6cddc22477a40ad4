from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import CommandError


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    cmd: List[str]
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Raise CommandError unless the command exited 0."""
        if not self.ok:
            raise CommandError(self.cmd, self.returncode, self.stderr)
        return self


class Shell:
    """Runs external commands for steps.

    Keeps a private copy of the environment so that PATH changes made by one
    step (e.g. after Homebrew is installed) are visible to later steps
    without touching ``os.environ``.

    Config:
    - env: dict[str, str] – base environment (default: copy of os.environ)
    - show: bool – echo command output live while it runs
    - timeout: float – default per-command timeout in seconds (None = wait forever)
    """

    def __init__(self, env: Optional[Dict[str, str]] = None, show: bool = False, timeout: Optional[float] = None) -> None:
        self.env: Dict[str, str] = dict(os.environ if env is None else env)
        self.show = show
        self.timeout = timeout

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name, path=self.env.get("PATH"))

    def prepend_path(self, directory: str) -> None:
        parts = [p for p in self.env.get("PATH", "").split(os.pathsep) if p]
        if directory in parts:
            parts.remove(directory)
        self.env["PATH"] = os.pathsep.join([directory] + parts)

    def probe(self, cmd: List[str]) -> CommandResult:
        """Run a read-only query command; output is never echoed."""
        return self._execute(cmd, show=False)

    def run(
        self,
        cmd: List[str],
        input: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        check: bool = False,
    ) -> CommandResult:
        """Run a command that changes the machine."""
        logger.info("running: %s", " ".join(cmd))
        result = self._execute(cmd, input=input, env=env, timeout=timeout, show=self.show)
        if check:
            result.check()
        return result

    def _execute(
        self,
        cmd: List[str],
        input: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        show: bool = False,
    ) -> CommandResult:
        merged = dict(self.env)
        if env:
            merged.update(env)
        timeout = timeout if timeout is not None else self.timeout
        start = time.time()
        stdout_buf: list[str] = []
        stderr_buf: list[str] = []
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE if input is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,  # line-buffered
                env=merged,
            )
        except OSError as e:
            logger.debug("could not start %s: %s", cmd[0], e)
            return CommandResult(cmd, 127, "", str(e), time.time() - start)

        def _read_stream(stream, buf: list[str]) -> None:
            try:
                for line in iter(stream.readline, ""):
                    buf.append(line)
                    if show:
                        print(line, end="", flush=True)
            finally:
                stream.close()

        readers = [
            threading.Thread(target=_read_stream, args=(proc.stdout, stdout_buf), daemon=True),
            threading.Thread(target=_read_stream, args=(proc.stderr, stderr_buf), daemon=True),
        ]
        for t in readers:
            t.start()

        if input is not None and proc.stdin is not None:
            try:
                proc.stdin.write(input)
            except BrokenPipeError:
                pass
            finally:
                proc.stdin.close()

        timed_out = False
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            proc.kill()
            proc.wait()

        for t in readers:
            t.join()

        stderr_text = "".join(stderr_buf).strip()
        if timed_out:
            stderr_text = (stderr_text + f"\ntimed out after {timeout}s").strip()
        return CommandResult(
            cmd=cmd,
            returncode=None if timed_out else proc.returncode,
            stdout="".join(stdout_buf).strip(),
            stderr=stderr_text,
            duration=time.time() - start,
        )
