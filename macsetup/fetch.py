"""Download remote installer scripts."""
from __future__ import annotations

import logging
from typing import Callable, Tuple

import requests

from .errors import DownloadError


logger = logging.getLogger(__name__)

HOMEBREW_INSTALLER_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
OH_MY_ZSH_INSTALLER_URL = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
POETRY_INSTALLER_URL = "https://install.python-poetry.org"

CONNECT_TIMEOUT = 30.0
READ_TIMEOUT = 300.0
# Upper bound for running a downloaded installer once
INSTALL_TIMEOUT = 600.0

Fetcher = Callable[[str], str]


def fetch_script(url: str, timeout: Tuple[float, float] = (CONNECT_TIMEOUT, READ_TIMEOUT)) -> str:
    """Return the body of an installer script, raising DownloadError on any failure."""
    logger.info("downloading %s", url)
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise DownloadError(f"could not download {url}: {e}") from e
    if not resp.text.strip():
        raise DownloadError(f"empty installer downloaded from {url}")
    return resp.text
