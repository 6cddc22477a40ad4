"""Filesystem locations touched by macsetup."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


STATE_DIRNAME = ".macsetup"
HISTORY_DB = "history.db"
CONFIG_FILENAME = ".macsetup.yaml"


@dataclass(frozen=True)
class HomePaths:
    """Well-known paths under a user's home directory.

    Everything is derived from ``home`` so tests can point it at a
    temporary directory.

    Example:
        >>> HomePaths(Path("/Users/ada")).zshrc
        PosixPath('/Users/ada/.zshrc')
    """

    home: Path

    @classmethod
    def current(cls, home: Optional[Path] = None) -> "HomePaths":
        return cls(Path(home) if home else Path.home())

    @property
    def zshrc(self) -> Path:
        return self.home / ".zshrc"

    @property
    def zprofile(self) -> Path:
        return self.home / ".zprofile"

    @property
    def oh_my_zsh(self) -> Path:
        return self.home / ".oh-my-zsh"

    @property
    def ssh_dir(self) -> Path:
        return self.home / ".ssh"

    @property
    def ssh_key(self) -> Path:
        return self.ssh_dir / "id_ed25519"

    @property
    def ssh_public_key(self) -> Path:
        return self.ssh_dir / "id_ed25519.pub"

    @property
    def ssh_config(self) -> Path:
        return self.ssh_dir / "config"

    @property
    def local_bin(self) -> Path:
        return self.home / ".local" / "bin"

    @property
    def vscode_settings(self) -> Path:
        return self.home / "Library" / "Application Support" / "Code" / "User" / "settings.json"

    @property
    def state_dir(self) -> Path:
        return self.home / STATE_DIRNAME

    @property
    def history_db(self) -> Path:
        return self.state_dir / HISTORY_DB

    @property
    def config_file(self) -> Path:
        return self.home / CONFIG_FILENAME
