from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import StepError
from ..step import PackageStep, Step, StepResult


VSCODE_APP_CLI = Path("/Applications/Visual Studio Code.app/Contents/Resources/app/bin")

EXTENSIONS = (
    "ms-python.python",
    "GitHub.vscode-pull-request-github",
    "shd101wyy.markdown-preview-enhanced",
    "vscode-icons-team.vscode-icons",
    "GoogleCloudTools.cloudcode",
)

SETTINGS: Dict[str, Any] = {
    "editor.rulers": [70, 100],
    "workbench.iconTheme": "vscode-icons",
}


class VSCodeExtensionsStep(PackageStep):
    name = "vscode-extensions"
    description = "install VS Code extensions"
    packages = EXTENSIONS
    app_cli_dir = VSCODE_APP_CLI

    def _code(self) -> Optional[str]:
        found = self.shell.which("code")
        if not found and (self.app_cli_dir / "code").exists():
            self.shell.prepend_path(str(self.app_cli_dir))
            found = self.shell.which("code")
        return found

    def installed(self) -> set[str]:
        if not self._code():
            return set()
        res = self.shell.probe(["code", "--list-extensions"])
        return {line.strip() for line in res.stdout.splitlines() if line.strip()} if res.ok else set()

    def install_one(self, package: str) -> None:
        self.shell.run(["code", "--install-extension", package], check=True)

    def apply(self) -> Optional[StepResult]:
        if not self._code():
            raise StepError("VS Code CLI `code` not found; install Visual Studio Code first")
        return super().apply()


class VSCodeSettingsStep(Step):
    """Merge the preferred editor settings into the user's settings.json.

    Other keys are preserved. A file VS Code wrote with comments or trailing
    commas is not plain JSON and is left for a manual merge.
    """

    name = "vscode-settings"
    description = "write editor rulers and icon theme into VS Code settings.json"
    settings = SETTINGS

    def _load(self) -> Dict[str, Any]:
        path = self.paths.vscode_settings
        if not path.exists() or not path.read_text().strip():
            return {}
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise StepError(f"{path} is not plain JSON ({e}); merge {sorted(self.settings)} manually") from e
        if not isinstance(data, dict):
            raise StepError(f"{path} does not contain a JSON object")
        return data

    def is_satisfied(self) -> bool:
        try:
            current = self._load()
        except StepError:
            return False
        return all(current.get(k) == v for k, v in self.settings.items())

    def apply(self) -> Optional[StepResult]:
        current = self._load()
        changed = sorted(k for k, v in self.settings.items() if current.get(k) != v)
        current.update(self.settings)
        path = self.paths.vscode_settings
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(current, indent=4) + "\n")
        return StepResult.succeeded("updated " + ", ".join(changed))
