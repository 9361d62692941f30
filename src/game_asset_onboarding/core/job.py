"""Extraction job state and outcome types.

An ``ExtractionJob`` is the mutable record owned by the supervisor.
Observers only ever see ``JobSnapshot`` copies of it.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from ..sources.base import Source


class JobStatus(str, Enum):
    """Lifecycle states of one extraction attempt."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED)


# The only edges the supervisor may take.
ALLOWED_TRANSITIONS: frozenset[tuple[JobStatus, JobStatus]] = frozenset(
    {
        (JobStatus.IDLE, JobStatus.RUNNING),
        (JobStatus.RUNNING, JobStatus.SUCCEEDED),
        (JobStatus.RUNNING, JobStatus.FAILED),
        (JobStatus.FAILED, JobStatus.RUNNING),
    }
)


def is_allowed_transition(current: JobStatus, target: JobStatus) -> bool:
    return (current, target) in ALLOWED_TRANSITIONS


@dataclass(frozen=True)
class GenericFailure:
    """Extraction ran and failed without identifiable missing content."""

    message: str


@dataclass(frozen=True)
class MissingFiles:
    """Extraction failed because required archives are absent.

    Attributes:
        names: Archive file names the user still has to supply
    """

    names: tuple[str, ...]


ExtractionError = Union[GenericFailure, MissingFiles]


def clamp_progress(value: float) -> float:
    """Clamp a reported progress value into [0.0, 1.0].

    NaN counts as no progress.
    """
    if value != value:
        return 0.0
    return max(0.0, min(1.0, float(value)))


@dataclass
class ExtractionJob:
    """Mutable state of one extraction attempt."""

    source: Source
    destination: Path
    status: JobStatus = JobStatus.IDLE
    progress: float = 0.0
    current_file: str = ""
    error: ExtractionError | None = None
    generation: int = field(default=0, repr=False)

    def snapshot(self) -> "JobSnapshot":
        return JobSnapshot(
            status=self.status,
            progress=self.progress,
            current_file=self.current_file,
            error=self.error,
            source=self.source,
            destination=self.destination,
        )


@dataclass(frozen=True)
class JobSnapshot:
    """Immutable view of a job, as published to observers."""

    status: JobStatus
    progress: float = 0.0
    current_file: str = ""
    error: ExtractionError | None = None
    source: Source | None = None
    destination: Path | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


IDLE_SNAPSHOT = JobSnapshot(status=JobStatus.IDLE)
