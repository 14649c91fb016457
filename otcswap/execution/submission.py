from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from ..errors import OTCError
from ..utils.logging import get_logger, log_json
from ..utils.monitoring import submission_failures_counter

logger = get_logger(__name__)


class SubmissionState(Enum):
    """Lifecycle states of one state-changing ledger call."""

    VALIDATING = auto()
    APPROVING = auto()
    SUBMITTING = auto()
    CONFIRMING = auto()
    EXTRACTING_EVENT = auto()
    DONE = auto()
    FAILED = auto()


# allowed forward moves; FAILED is reachable from any non-terminal state
_TRANSITIONS = {
    SubmissionState.VALIDATING: {SubmissionState.APPROVING, SubmissionState.SUBMITTING},
    SubmissionState.APPROVING: {SubmissionState.SUBMITTING},
    SubmissionState.SUBMITTING: {SubmissionState.CONFIRMING},
    SubmissionState.CONFIRMING: {SubmissionState.EXTRACTING_EVENT},
    SubmissionState.EXTRACTING_EVENT: {SubmissionState.DONE},
    SubmissionState.DONE: set(),
    SubmissionState.FAILED: set(),
}


@dataclass(slots=True)
class Submission:
    """Track one operation through ``VALIDATING`` ... ``DONE``.

    ``history`` keeps every state visited, so a failure during approval
    (``[VALIDATING, APPROVING, FAILED]``) is distinguishable from one
    before it (``[VALIDATING, FAILED]``).
    """

    operation: str
    state: SubmissionState = field(default=SubmissionState.VALIDATING)
    history: List[SubmissionState] = field(default_factory=lambda: [SubmissionState.VALIDATING])
    failure_kind: Optional[str] = None
    failed_at: Optional[SubmissionState] = None
    tx_hashes: List[str] = field(default_factory=list)

    @property
    def step(self) -> str:
        return self.state.name.lower()

    @property
    def finished(self) -> bool:
        return self.state in (SubmissionState.DONE, SubmissionState.FAILED)

    def advance(self, state: SubmissionState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"{self.operation}: illegal transition {self.state.name} -> {state.name}")
        self.state = state
        self.history.append(state)
        log_json(logger, "submission_step", operation=self.operation, step=self.step)

    def record_tx(self, tx_hash: str) -> None:
        self.tx_hashes.append(tx_hash)

    def fail(self, error: OTCError) -> OTCError:
        """Move to ``FAILED``, stamp ``error`` with context and return it."""
        if self.finished:
            return error
        if error.operation is None:
            error.operation = self.operation
        if error.step is None:
            error.step = self.step
        self.failed_at = self.state
        self.failure_kind = error.kind
        self.state = SubmissionState.FAILED
        self.history.append(SubmissionState.FAILED)
        error.history = list(self.history)
        submission_failures_counter.labels(operation=self.operation, kind=error.kind).inc()
        log_json(
            logger,
            "submission_failed",
            operation=self.operation,
            step=error.step,
            kind=error.kind,
            error=error.message,
            tx_hashes=self.tx_hashes,
        )
        return error


__all__ = ["SubmissionState", "Submission"]
