"""
Run context — process-wide switches set once at startup.

The CLI sets these before a pipeline starts:

    - CLI:    use_cases.provision → context.set_dry_run(flag)
    - Tests:  monkeypatch or set_dry_run() + reset in teardown

Module-level singleton (not a class).  Read by the subprocess runner
and the file writers, which are the only places that mutate the
machine.
"""

from __future__ import annotations

_dry_run: bool = False


def set_dry_run(enabled: bool) -> None:
    """Enable or disable dry-run mode for the current process."""
    global _dry_run
    _dry_run = enabled


def is_dry_run() -> bool:
    """True when mutating commands must be reported, not executed."""
    return _dry_run
