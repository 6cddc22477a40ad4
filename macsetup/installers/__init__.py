from __future__ import annotations

from .system import MacOSCheckStep, XcodeToolsStep
from .homebrew import HomebrewStep, BrewPackagesStep, DevToolsStep, CoreAppsStep, ClaudeCodeStep, WorkToolsStep
from .zsh import OhMyZshStep, ShellProfileStep
from .python import PyenvPythonStep, PoetryStep
from .git import GitIdentityStep, SshKeyStep, SshClipboardStep
from .vscode import VSCodeExtensionsStep, VSCodeSettingsStep
from .dock import DockStep


__all__ = [
    "MacOSCheckStep",
    "XcodeToolsStep",
    "HomebrewStep",
    "BrewPackagesStep",
    "DevToolsStep",
    "CoreAppsStep",
    "ClaudeCodeStep",
    "WorkToolsStep",
    "OhMyZshStep",
    "ShellProfileStep",
    "PyenvPythonStep",
    "PoetryStep",
    "GitIdentityStep",
    "SshKeyStep",
    "SshClipboardStep",
    "VSCodeExtensionsStep",
    "VSCodeSettingsStep",
    "DockStep",
]
