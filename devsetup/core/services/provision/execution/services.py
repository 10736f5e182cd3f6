"""
L4 Execution — Background service management.

After a database or container engine is installed its unit is
enabled and started.  Both calls are unconditional: inside a
container (no systemd) they fail, and the caller decides whether
that failure matters.
"""

from __future__ import annotations

import logging
from typing import Any

from devsetup.core.services.provision.execution.subprocess_runner import run_command

logger = logging.getLogger(__name__)


def enable_and_start(service: str) -> dict[str, Any]:
    """``systemctl enable SERVICE`` then ``systemctl start SERVICE``.

    Returns:
        The first failing run result, or the ``start`` result.
    """
    if not service:
        return {"ok": False, "error": "No service specified"}

    result: dict[str, Any] = {}
    for action in ("enable", "start"):
        result = run_command(["systemctl", action, service], needs_sudo=True, timeout=120)
        if not result["ok"]:
            logger.warning("systemctl %s %s failed: %s", action, service, result.get("error"))
            return result
    logger.info("Service %s enabled and started", service)
    return result
