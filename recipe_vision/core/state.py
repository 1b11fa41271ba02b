"""Submission state contracts for `recipe_vision.core.orchestrator`.

Architectural role:
    Defines the lifecycle value owned by the orchestrator and read by adapters.
    A submission moves `IDLE -> IN_FLIGHT -> {SUCCEEDED | FAILED}`; a later
    submission starts again from whichever terminal state is current.

Determinism:
    Values are immutable and state-free. Transitions are performed only by the
    orchestrator, which swaps whole `SubmissionState` instances.
"""

from dataclasses import dataclass
from enum import Enum


class SubmissionStatus(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionState:
    """Snapshot of the orchestrator's submission lifecycle.

    Attributes:
        status: Current lifecycle stage.
        text: Generated text, set only for `SUCCEEDED`.
        message: User-visible error string, set only for `FAILED`.
    """

    status: SubmissionStatus = SubmissionStatus.IDLE
    text: str | None = None
    message: str | None = None

    @classmethod
    def idle(cls) -> "SubmissionState":
        return cls()

    @classmethod
    def in_flight(cls) -> "SubmissionState":
        return cls(status=SubmissionStatus.IN_FLIGHT)

    @classmethod
    def succeeded(cls, text: str) -> "SubmissionState":
        return cls(status=SubmissionStatus.SUCCEEDED, text=text)

    @classmethod
    def failed(cls, message: str) -> "SubmissionState":
        return cls(status=SubmissionStatus.FAILED, message=message)

    @property
    def is_terminal(self) -> bool:
        return self.status in (SubmissionStatus.SUCCEEDED, SubmissionStatus.FAILED)

    @property
    def output(self) -> str:
        """Text shown in the output pane: result, error string, or empty."""
        if self.status == SubmissionStatus.SUCCEEDED:
            return self.text or ""
        if self.status == SubmissionStatus.FAILED:
            return self.message or ""
        return ""
