"""
Receipt model — the step execution contract.

Every provisioning step returns a Receipt.  Steps never raise:
failures are captured here and the engine decides, per step,
whether a failure stops the pipeline.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Result of one provisioning step.

    ``changed`` is True only when a mutating command actually ran
    (or would have run, in dry-run mode).  A second pass over an
    already provisioned machine yields receipts that are all
    ``changed=False``.
    """

    step: str
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    ended_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None
    changed: bool = False

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the step succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the step failed."""
        return self.status == "failed"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @classmethod
    def success(
        cls,
        step: str,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        kwargs.setdefault("changed", True)
        return cls(step=step, status="ok", output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        step: str,
        error: str,
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(step=step, status="failed", error=error, **kwargs)

    @classmethod
    def skip(
        cls,
        step: str,
        reason: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt (already satisfied, or not applicable)."""
        return cls(step=step, status="skipped", output=reason, **kwargs)

    @classmethod
    def from_run(
        cls,
        step: str,
        result: dict[str, Any],
        output: str = "",
    ) -> Receipt:
        """Build a receipt from a ``run_command`` result dict."""
        if result["ok"]:
            return cls.success(
                step,
                output=output or result.get("stdout", ""),
                metadata={"dry_run": True} if result.get("dry_run") else {},
            )
        return cls.failure(
            step,
            error=result.get("error", "Command failed"),
            return_code=result.get("return_code"),
            metadata={
                k: result[k] for k in ("stderr", "cmd") if result.get(k)
            },
        )
