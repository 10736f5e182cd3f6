"""
L4 Execution — HTTP fetches.

Release metadata queries and file downloads.  No checksum or
signature is verified: the hosting service is a trust boundary
the provisioner accepts as-is.
"""

from __future__ import annotations

import json
import logging
import urllib.request
from pathlib import Path
from typing import Any

from devsetup import __version__
from devsetup.core.context import is_dry_run

logger = logging.getLogger(__name__)

_USER_AGENT = f"devsetup/{__version__}"


def fetch_json(url: str, *, timeout: int = 60) -> Any:
    """GET ``url`` and parse the body as JSON.

    Raises:
        OSError: on network errors (``urllib.error.URLError`` is one).
        ValueError: when the body is not valid JSON.
    """
    req = urllib.request.Request(
        url,
        headers={
            "Accept": "application/vnd.github+json",
            "User-Agent": _USER_AGENT,
        },
    )
    logger.debug("GET %s", url)
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        return json.loads(resp.read())


def download_file(url: str, dest: Path, *, timeout: int = 60) -> dict[str, Any]:
    """Stream ``url`` into ``dest``.

    Returns:
        ``{"ok": True, "size_bytes": N}`` on success, or an error dict.
        A failed download never leaves a partial ``dest`` behind.
    """
    if is_dry_run():
        logger.info("[dry-run] download %s → %s", url, dest)
        return {"ok": True, "dry_run": True, "size_bytes": 0}

    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s", url)
    try:
        req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        with urllib.request.urlopen(req, timeout=timeout) as resp, open(dest, "wb") as f:
            downloaded = 0
            while True:
                chunk = resp.read(8192)
                if not chunk:
                    break
                f.write(chunk)
                downloaded += len(chunk)
    except OSError as e:
        dest.unlink(missing_ok=True)
        return {"ok": False, "error": f"Download failed: {url}: {e}"}

    logger.debug("Downloaded %d bytes to %s", downloaded, dest)
    return {"ok": True, "size_bytes": downloaded}
