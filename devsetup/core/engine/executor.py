"""
Engine executor — the step pipeline loop.

A pipeline is an ordered list of steps.  Each step returns a
Receipt; the engine collects them and applies the step's failure
policy:

    fatal step fails      → stop; later steps are not run
    non-fatal step fails  → warn, keep going

Nothing is rolled back.  The operator re-runs the pipeline and
per-step existence probes skip whatever already completed.

Flow:
    plan → for each step: run → receipt → policy → report
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable

from devsetup.core.models.action import Receipt

logger = logging.getLogger(__name__)


@dataclass
class Step:
    """One unit of provisioning work."""

    id: str
    label: str
    run: Callable[[], Receipt]
    fatal: bool = True
    group: str = ""


@dataclass
class ExecutionPlan:
    """An ordered set of steps to execute."""

    operation_id: str = ""
    pipeline: str = ""
    steps: list[Step] = field(default_factory=list)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def add(
        self,
        step_id: str,
        label: str,
        run: Callable[[], Receipt],
        *,
        fatal: bool = True,
        group: str = "",
    ) -> Step:
        step = Step(id=step_id, label=label, run=run, fatal=fatal, group=group)
        self.steps.append(step)
        return step

    def extend(self, steps: list[Step]) -> None:
        self.steps.extend(steps)


@dataclass
class ExecutionReport:
    """Result of executing a plan."""

    operation_id: str = ""
    pipeline: str = ""
    receipts: list[Receipt] = field(default_factory=list)
    aborted_at: str | None = None
    fatal_receipt: Receipt | None = None

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    @property
    def changed(self) -> int:
        """Number of steps that performed a mutating action."""
        return sum(1 for r in self.receipts if r.changed)

    @property
    def aborted(self) -> bool:
        return self.aborted_at is not None

    @property
    def all_ok(self) -> bool:
        return self.failed == 0

    @property
    def status(self) -> str:
        if self.aborted:
            return "aborted"
        if self.failed == 0:
            return "ok"
        return "partial"

    @property
    def exit_code(self) -> int:
        """0 unless a fatal step failed; then that step's return code.

        A child killed by signal N reports ``-N``; that becomes the
        shell convention ``128 + N``.
        """
        if self.fatal_receipt is None:
            return 0
        rc = self.fatal_receipt.return_code
        if not rc:
            return 1
        return 128 - rc if rc < 0 else rc

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "pipeline": self.pipeline,
            "status": self.status,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "changed": self.changed,
            "aborted_at": self.aborted_at,
            "exit_code": self.exit_code,
            "receipts": [r.model_dump(mode="json") for r in self.receipts],
        }


def run_step(step: Step) -> Receipt:
    """Run one step, converting unexpected exceptions into a failure."""
    start = time.monotonic()
    try:
        receipt = step.run()
    except Exception as e:
        # Steps are expected to return a failure receipt instead.
        logger.exception("Step %s raised", step.id)
        receipt = Receipt.failure(step.id, error=f"Unexpected error: {e}")
    receipt.duration_ms = int((time.monotonic() - start) * 1000)
    return receipt


def execute_plan(
    plan: ExecutionPlan,
    *,
    on_start: Callable[[Step], None] | None = None,
    on_receipt: Callable[[Step, Receipt], None] | None = None,
) -> ExecutionReport:
    """Execute every step in order, honouring each step's failure policy.

    Args:
        plan: The execution plan.
        on_start: Called before each step (CLI progress output).
        on_receipt: Called with each step's receipt.

    Returns:
        ExecutionReport with one receipt per step that ran.
    """
    report = ExecutionReport(operation_id=plan.operation_id, pipeline=plan.pipeline)

    for step in plan.steps:
        if on_start is not None:
            on_start(step)

        receipt = run_step(step)
        report.receipts.append(receipt)

        status_marker = "✓" if receipt.ok else "✗" if receipt.failed else "⊘"
        logger.info("%s %s → %s", status_marker, step.id, receipt.status)

        if on_receipt is not None:
            on_receipt(step, receipt)

        if not receipt.failed:
            continue

        if step.fatal:
            logger.error("Fatal step %s failed: %s", step.id, receipt.error)
            report.aborted_at = step.id
            report.fatal_receipt = receipt
            break

        logger.warning("Step %s failed, continuing: %s", step.id, receipt.error)

    return report


def generate_operation_id() -> str:
    """Generate a unique operation ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"op-{now}-{short}"
