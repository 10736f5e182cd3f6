"""
L4 Execution — Sudo credential keep-alive.

A provisioning run issues many privileged commands spread over
minutes.  The operator is asked for the password once (``sudo -v``)
and a daemon thread refreshes the cached timestamp every minute
until the run ends.  The thread is a daemon, so it also dies with
the process when a run aborts.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import threading

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = 60


class SudoKeepAlive:
    """Context manager that validates and keeps sudo credentials warm.

    Usage::

        with SudoKeepAlive() as keepalive:
            if not keepalive.ok:
                ...  # operator refused / sudo unavailable
            run_pipeline()
    """

    def __init__(self, interval: int = REFRESH_INTERVAL, *, enabled: bool = True) -> None:
        self._interval = interval
        self._enabled = enabled
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.ok = True

    def _needed(self) -> bool:
        return self._enabled and os.geteuid() != 0

    def start(self) -> None:
        if not self._needed():
            return
        if shutil.which("sudo") is None:
            logger.warning("sudo not found; privileged steps will fail")
            self.ok = False
            return

        logger.info("Checking sudo privileges...")
        # Inherits the terminal so sudo can prompt for the password.
        rc = subprocess.run(["sudo", "-v"]).returncode
        if rc != 0:
            self.ok = False
            return

        self._thread = threading.Thread(
            target=self._refresh_loop, name="sudo-keepalive", daemon=True,
        )
        self._thread.start()

    def _refresh_loop(self) -> None:
        while not self._stop.wait(self._interval):
            try:
                subprocess.run(
                    ["sudo", "-n", "true"],
                    capture_output=True, timeout=30,
                )
            except (OSError, subprocess.TimeoutExpired) as exc:
                logger.debug("sudo refresh failed: %s", exc)

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None

    def __enter__(self) -> SudoKeepAlive:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
