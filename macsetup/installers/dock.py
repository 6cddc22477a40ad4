from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..errors import StepError
from ..step import PackageStep, StepResult
from .homebrew import BREW_ENV


logger = logging.getLogger(__name__)

DOCK_APPS = ("Visual Studio Code", "Spotify", "Google Chrome", "Obsidian")
WORK_DOCK_APPS = ("Notion", "Slack", "zoom.us")


class DockStep(PackageStep):
    """Pin applications to the Dock with dockutil.

    Apps that are not installed are reported as failures; the Dock is
    restarted once at the end if anything was added.
    """

    name = "dock"
    description = "pin applications to the Dock with dockutil"
    applications_dir = Path("/Applications")

    @property
    def packages(self) -> tuple[str, ...]:  # type: ignore[override]
        return DOCK_APPS + (WORK_DOCK_APPS if self.config.work_tools else ())

    def installed(self) -> set[str]:
        if not self.shell.which("dockutil"):
            return set()
        res = self.shell.probe(["dockutil", "--list"])
        if not res.ok:
            return set()
        return {line.split("\t", 1)[0].strip() for line in res.stdout.splitlines() if line.strip()}

    def install_one(self, package: str) -> None:
        app = self.applications_dir / f"{package}.app"
        if not app.exists():
            raise StepError(f"{app} not installed")
        self.shell.run(["dockutil", "--add", str(app), "--no-restart"], check=True)

    def apply(self) -> Optional[StepResult]:
        if not self.shell.which("dockutil"):
            self.shell.run(["brew", "install", "dockutil"], env=BREW_ENV, check=True)
            if not self.shell.which("dockutil"):
                raise StepError("dockutil installed but not found on PATH")
        before = set(self.missing())
        try:
            return super().apply()
        finally:
            if before - set(self.missing()):
                res = self.shell.run(["killall", "Dock"])
                if not res.ok:
                    logger.warning("could not restart the Dock: %s", res.stderr)
