from __future__ import annotations

from typing import Optional

from .. import dotfiles
from ..errors import StepError
from ..fetch import OH_MY_ZSH_INSTALLER_URL, Fetcher, fetch_script
from ..step import Step, StepResult


SHELL_PROFILE_BLOCK = """\
# Homebrew
export HOMEBREW_NO_ENV_HINTS=true

# Oh My Zsh theme
ZSH_THEME="essembeh"

# pyenv
if command -v pyenv 1>/dev/null 2>&1; then
  eval "$(pyenv init -)"
fi

# Poetry
export PATH="$HOME/.local/bin:$PATH"
"""


class OhMyZshStep(Step):
    name = "oh-my-zsh"
    description = "install Oh My Zsh"

    def __init__(self, *args, fetch: Fetcher = fetch_script, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.fetch = fetch

    def is_satisfied(self) -> bool:
        return self.paths.oh_my_zsh.is_dir()

    def apply(self) -> Optional[StepResult]:
        script = self.fetch(OH_MY_ZSH_INSTALLER_URL)
        # RUNZSH=no keeps the installer from exec'ing a new shell mid-run
        self.shell.run(["sh", "-c", script, "", "--unattended"], env={"RUNZSH": "no"}, check=True)
        if not self.is_satisfied():
            raise StepError(f"installer finished but {self.paths.oh_my_zsh} is missing")
        return StepResult.succeeded()


class ShellProfileStep(Step):
    """Managed block in ~/.zshrc (theme, pyenv init, Poetry PATH).

    The existing file is backed up before it is changed.
    """

    name = "shell-profile"
    description = "configure ~/.zshrc for Homebrew, pyenv and Poetry"

    def is_satisfied(self) -> bool:
        return dotfiles.has_block(self.paths.zshrc, "shell", SHELL_PROFILE_BLOCK)

    def apply(self) -> Optional[StepResult]:
        saved = dotfiles.backup(self.paths.zshrc)
        dotfiles.write_block(self.paths.zshrc, "shell", SHELL_PROFILE_BLOCK)
        return StepResult.succeeded(f"backed up to {saved.name}" if saved else "created ~/.zshrc")
