from __future__ import annotations

import logging
from typing import Optional

from .. import dotfiles
from ..errors import StepError
from ..step import Step, StepResult


logger = logging.getLogger(__name__)

SSH_CONFIG_BLOCK = """\
Host github.com
  AddKeysToAgent yes
  UseKeychain yes
  IdentityFile ~/.ssh/id_ed25519"""


class GitIdentityStep(Step):
    name = "git-identity"
    description = "set the global Git user.name and user.email"

    def _get(self, key: str) -> str:
        res = self.shell.probe(["git", "config", "--global", "--get", key])
        return res.stdout.strip() if res.ok else ""

    def is_satisfied(self) -> bool:
        return self._get("user.name") == self.config.name and self._get("user.email") == self.config.email

    def apply(self) -> Optional[StepResult]:
        self.shell.run(["git", "config", "--global", "user.name", self.config.name], check=True)
        self.shell.run(["git", "config", "--global", "user.email", self.config.email], check=True)
        return StepResult.succeeded(f"{self.config.name} <{self.config.email}>")


class SshKeyStep(Step):
    """Generate an ed25519 key pair and a github.com stanza in ~/.ssh/config.

    An existing key is never replaced.
    """

    name = "ssh-key"
    description = "generate an SSH key and configure ~/.ssh/config for GitHub"

    def is_satisfied(self) -> bool:
        p = self.paths
        return p.ssh_key.exists() and p.ssh_public_key.exists() and dotfiles.has_block(p.ssh_config, "github", SSH_CONFIG_BLOCK)

    def apply(self) -> Optional[StepResult]:
        p = self.paths
        p.ssh_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        notes = []
        if not p.ssh_key.exists():
            self.shell.run(
                ["ssh-keygen", "-t", "ed25519", "-C", self.config.email, "-f", str(p.ssh_key), "-N", ""],
                check=True,
            )
            notes.append("key generated")
        elif not p.ssh_public_key.exists():
            raise StepError(f"{p.ssh_key} exists without {p.ssh_public_key.name}; fix it manually")
        else:
            notes.append("existing key kept")
        dotfiles.write_block(p.ssh_config, "github", SSH_CONFIG_BLOCK)
        p.ssh_config.chmod(0o600)

        res = self.shell.run(["ssh-add", "--apple-use-keychain", str(p.ssh_key)])
        if not res.ok:
            logger.warning("ssh-add failed: %s", res.stderr)
            notes.append("not added to the agent; it will be added on first use")
        return StepResult.succeeded(", ".join(notes))


class SshClipboardStep(Step):
    """Put the public key on the clipboard so it can be pasted into GitHub."""

    name = "ssh-clipboard"
    description = "copy the SSH public key to the clipboard"

    def _public_key(self) -> str:
        return self.paths.ssh_public_key.read_text().strip() if self.paths.ssh_public_key.exists() else ""

    def is_satisfied(self) -> bool:
        key = self._public_key()
        if not key:
            return False
        res = self.shell.probe(["pbpaste"])
        return res.ok and res.stdout.strip() == key

    def apply(self) -> Optional[StepResult]:
        key = self._public_key()
        if not key:
            raise StepError(f"no public key at {self.paths.ssh_public_key}")
        self.shell.run(["pbcopy"], input=key + "\n", check=True)
        return StepResult.succeeded("add it to your GitHub account")
