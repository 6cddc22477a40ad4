"""Marker-delimited blocks in dotfiles (~/.zshrc, ~/.zprofile, ~/.ssh/config).

A block looks like::

    # >>> macsetup shell >>>
    ...body...
    # <<< macsetup shell <<<

Writing a block replaces an existing block of the same section in place,
so re-running a step never appends the same text twice.
"""
from __future__ import annotations

import re
import shutil
import time
from pathlib import Path
from typing import Optional


def begin_marker(section: str) -> str:
    return f"# >>> macsetup {section} >>>"


def end_marker(section: str) -> str:
    return f"# <<< macsetup {section} <<<"


def render_block(section: str, body: str) -> str:
    return f"{begin_marker(section)}\n{body.strip()}\n{end_marker(section)}\n"


def _block_re(section: str) -> re.Pattern[str]:
    return re.compile(
        re.escape(begin_marker(section)) + r"\n.*?" + re.escape(end_marker(section)) + r"\n?",
        re.DOTALL,
    )


def read_block(path: Path, section: str) -> Optional[str]:
    """Return the body of ``section`` in ``path``, or None when absent."""
    if not path.exists():
        return None
    m = _block_re(section).search(path.read_text())
    if not m:
        return None
    lines = m.group(0).splitlines()
    return "\n".join(lines[1:-1])


def has_block(path: Path, section: str, body: str) -> bool:
    return read_block(path, section) == body.strip()


def backup(path: Path) -> Optional[Path]:
    """Copy ``path`` to ``<path>.backup.<timestamp>`` if it exists."""
    if not path.exists():
        return None
    target = path.with_name(f"{path.name}.backup.{time.strftime('%Y%m%d_%H%M%S')}")
    shutil.copy2(path, target)
    return target


def write_block(path: Path, section: str, body: str) -> None:
    """Insert or replace the ``section`` block in ``path``."""
    block = render_block(section, body)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = path.read_text() if path.exists() else ""
    pattern = _block_re(section)
    if pattern.search(text):
        text = pattern.sub(lambda _: block, text, count=1)
    else:
        if text and not text.endswith("\n"):
            text += "\n"
        text += ("\n" if text else "") + block
    path.write_text(text)
