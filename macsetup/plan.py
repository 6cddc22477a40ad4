"""The default provisioning plan.

Steps run in one fixed order that satisfies these dependencies:

- macos-check before everything (required, halts the run);
- homebrew before every step that calls ``brew``;
- dev-tools (pyenv, VS Code) before python and vscode-extensions;
- oh-my-zsh before shell-profile, since its installer rewrites ~/.zshrc;
- python before poetry, whose installer runs on python3;
- ssh-key before ssh-clipboard.

git-identity and ssh-key read the operator identity from the RunConfig,
which is resolved before the runner starts.
"""
from __future__ import annotations

from typing import List, Optional

from .config import Prompter, RunConfig
from .fetch import Fetcher, fetch_script
from .installers import (
    ClaudeCodeStep,
    CoreAppsStep,
    DevToolsStep,
    DockStep,
    GitIdentityStep,
    HomebrewStep,
    MacOSCheckStep,
    OhMyZshStep,
    PoetryStep,
    PyenvPythonStep,
    ShellProfileStep,
    SshClipboardStep,
    SshKeyStep,
    VSCodeExtensionsStep,
    VSCodeSettingsStep,
    WorkToolsStep,
    XcodeToolsStep,
)
from .paths import HomePaths
from .shell import Shell
from .step import Step


def default_steps(
    config: RunConfig,
    shell: Optional[Shell] = None,
    paths: Optional[HomePaths] = None,
    prompter: Optional[Prompter] = None,
    fetch: Fetcher = fetch_script,
) -> List[Step]:
    shell = shell or Shell()
    paths = paths or HomePaths.current()
    common = dict(shell=shell, paths=paths)
    return [
        MacOSCheckStep(config, **common),
        XcodeToolsStep(config, prompter=prompter, **common),
        HomebrewStep(config, fetch=fetch, **common),
        DevToolsStep(config, **common),
        CoreAppsStep(config, **common),
        OhMyZshStep(config, fetch=fetch, **common),
        ShellProfileStep(config, **common),
        PyenvPythonStep(config, **common),
        PoetryStep(config, fetch=fetch, **common),
        GitIdentityStep(config, **common),
        SshKeyStep(config, **common),
        SshClipboardStep(config, **common),
        VSCodeExtensionsStep(config, **common),
        VSCodeSettingsStep(config, **common),
        ClaudeCodeStep(config, **common),
        DockStep(config, **common),
        WorkToolsStep(config, **common),
    ]
