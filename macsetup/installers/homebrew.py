from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Callable, Optional

from .. import dotfiles
from ..errors import StepError
from ..fetch import HOMEBREW_INSTALLER_URL, Fetcher, fetch_script
from ..step import PackageStep, Step, StepResult


logger = logging.getLogger(__name__)

BREW_ENV = {"HOMEBREW_NO_ENV_HINTS": "1", "HOMEBREW_NO_AUTO_UPDATE": "1"}


def brew_prefix(machine: str) -> Path:
    return Path("/opt/homebrew") if machine == "arm64" else Path("/usr/local")


class HomebrewStep(Step):
    """Install Homebrew and put it on PATH.

    Adds ``eval "$(<prefix>/bin/brew shellenv)"`` to ``~/.zprofile`` for new
    shells and prepends the brew bin directory to the runner's own PATH so
    later steps can call ``brew`` in this process.
    """

    name = "homebrew"
    description = "install Homebrew and add it to ~/.zprofile"

    def __init__(self, *args, fetch: Fetcher = fetch_script, machine: Callable[[], str] = platform.machine, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fetch = fetch
        self.prefix = brew_prefix(machine())

    @property
    def shellenv(self) -> str:
        return f'eval "$({self.prefix / "bin" / "brew"} shellenv)"'

    def _locate(self) -> Optional[str]:
        found = self.shell.which("brew")
        if found:
            return found
        candidate = self.prefix / "bin" / "brew"
        if candidate.exists():
            # Installed but not on PATH yet; only the runner's env changes.
            self.shell.prepend_path(str(candidate.parent))
            return str(candidate)
        return None

    def is_satisfied(self) -> bool:
        return self._locate() is not None and dotfiles.has_block(self.paths.zprofile, "homebrew", self.shellenv)

    def apply(self) -> Optional[StepResult]:
        detail = "already installed, shell profile updated"
        if self._locate() is None:
            script = self.fetch(HOMEBREW_INSTALLER_URL)
            env = {"NONINTERACTIVE": "1"} if self.config.non_interactive else None
            self.shell.run(["/bin/bash", "-c", script], env=env, check=True)
            self.shell.prepend_path(str(self.prefix / "bin"))
            if self._locate() is None:
                raise StepError(f"installer finished but brew was not found under {self.prefix}")
            detail = f"installed under {self.prefix}"
        dotfiles.write_block(self.paths.zprofile, "homebrew", self.shellenv)
        return StepResult.succeeded(detail)


class BrewPackagesStep(PackageStep):
    """Install Homebrew formulae and casks that are not present yet."""

    formulae: tuple[str, ...] = ()
    casks: tuple[str, ...] = ()

    @property
    def packages(self) -> tuple[str, ...]:  # type: ignore[override]
        return self.formulae + self.casks

    def _brew_list(self, kind: str) -> set[str]:
        res = self.shell.probe(["brew", "list", kind, "-1"])
        if not res.ok:
            logger.debug("brew list %s failed: %s", kind, res.stderr)
            return set()
        return {line.strip() for line in res.stdout.splitlines() if line.strip()}

    def installed(self) -> set[str]:
        have: set[str] = set()
        if self.formulae:
            have |= self._brew_list("--formula")
        if self.casks:
            have |= self._brew_list("--cask")
        return have

    def install_one(self, package: str) -> None:
        cmd = ["brew", "install"]
        if package in self.casks:
            cmd.append("--cask")
        self.shell.run(cmd + [package], env=BREW_ENV, check=True)

    def apply(self) -> Optional[StepResult]:
        if not self.shell.which("brew"):
            raise StepError("brew not found on PATH; Homebrew must be installed first")
        return super().apply()


class DevToolsStep(BrewPackagesStep):
    name = "dev-tools"
    description = "install core development tools with Homebrew"
    formulae = ("git", "zsh", "pyenv", "xz", "hugo")
    casks = ("iterm2", "font-source-code-pro", "visual-studio-code")


class CoreAppsStep(BrewPackagesStep):
    name = "core-apps"
    description = "install core applications with Homebrew"
    casks = (
        "adobe-acrobat-reader",
        "google-chrome",
        "google-drive",
        "lastpass",
        "logi-options-plus",
        "obsidian",
        "spotify",
    )


class ClaudeCodeStep(BrewPackagesStep):
    name = "claude-code"
    description = "install the Claude Code CLI"
    casks = ("claude-code",)

    def is_satisfied(self) -> bool:
        return bool(self.shell.which("claude")) or super().is_satisfied()


GCLOUD_BLOCK = """\
# Google Cloud SDK
if [ -f "$(brew --prefix)/share/google-cloud-sdk/path.zsh.inc" ]; then
  source "$(brew --prefix)/share/google-cloud-sdk/path.zsh.inc"
  source "$(brew --prefix)/share/google-cloud-sdk/completion.zsh.inc"
fi"""


class WorkToolsStep(BrewPackagesStep):
    """Optional work applications, enabled by the work-tools flag."""

    name = "work-tools"
    description = "install work tools (1Password, Google Cloud SDK, Loom, Notion, Slack, Zoom)"
    casks = ("1password", "google-cloud-sdk", "loom", "notion", "slack", "zoom")

    def enabled(self) -> bool:
        return self.config.work_tools

    def is_satisfied(self) -> bool:
        return super().is_satisfied() and dotfiles.has_block(self.paths.zshrc, "gcloud", GCLOUD_BLOCK)

    def apply(self) -> Optional[StepResult]:
        try:
            result = super().apply()
        finally:
            # gcloud may already be present even when another cask failed
            if "google-cloud-sdk" not in self.missing():
                dotfiles.write_block(self.paths.zshrc, "gcloud", GCLOUD_BLOCK)
        return result
