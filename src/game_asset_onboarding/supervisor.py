"""Extraction supervisor.

Owns the background extraction task: starts the engine on a worker,
samples its progress on a fixed interval, classifies the terminal outcome
and drives retries.

The job record is mutated only here, under one re-entrant lock, and every
snapshot is published while that lock is held. Observers therefore see
snapshots in order, see the terminal snapshot exactly once and last, and
never see a tick that was sampled after the job finished.
"""

import logging
import threading
from pathlib import Path
from typing import Callable

from .core.errors import ExtractionInProgress, InvalidTransition
from .core.job import (
    IDLE_SNAPSHOT,
    ExtractionError,
    ExtractionJob,
    GenericFailure,
    JobSnapshot,
    JobStatus,
    MissingFiles,
    clamp_progress,
    is_allowed_transition,
)
from .engine.base import ExtractionEngine
from .sources.base import Source

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_FAILURE_MESSAGE = "Extraction failed"

Observer = Callable[[JobSnapshot], None]
Spawner = Callable[[Callable[[], None], str], None]


def spawn_daemon_thread(target: Callable[[], None], name: str) -> None:
    """Run ``target`` on a new daemon thread."""
    thread = threading.Thread(target=target, name=name, daemon=True)
    thread.start()


class ExtractionSupervisor:
    """Run one extraction job at a time and publish its progress.

    Example:
        >>> supervisor = ExtractionSupervisor(FilesystemExtractionEngine())
        >>> supervisor.subscribe(lambda snap: print(snap.status, snap.progress))
        >>> supervisor.start(source, Path('/data/assets'))
        >>> supervisor.wait()
        True
    """

    def __init__(
        self,
        engine: ExtractionEngine,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        spawn: Spawner | None = None,
    ):
        """Initialize the supervisor.

        Args:
            engine: Engine that performs the extraction
            poll_interval: Seconds between progress samples
            spawn: Launches a callable on a background context; defaults to
                a daemon thread. Tests pass a recorder to run work inline.
        """
        self.engine = engine
        self.poll_interval = poll_interval
        self._spawn = spawn or spawn_daemon_thread

        self._lock = threading.RLock()
        self._job: ExtractionJob | None = None
        self._generation = 0
        self._observers: list[Observer] = []
        self._finished = threading.Event()
        self._stop_polling = threading.Event()

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def status(self) -> JobStatus:
        with self._lock:
            return self._job.status if self._job else JobStatus.IDLE

    def snapshot(self) -> JobSnapshot:
        with self._lock:
            return self._job.snapshot() if self._job else IDLE_SNAPSHOT

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for published snapshots.

        Observers run on the publishing thread while the supervisor's lock
        is held; they may read the supervisor but must not block on work
        done by other threads.

        Returns:
            Function that removes the observer
        """
        with self._lock:
            self._observers.append(observer)

        def unsubscribe() -> None:
            with self._lock:
                if observer in self._observers:
                    self._observers.remove(observer)

        return unsubscribe

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the current job reaches a terminal state.

        Returns:
            True if the job is terminal, False on timeout or if no job ran
        """
        with self._lock:
            if self._job is None:
                return False
            finished = self._finished
        return finished.wait(timeout)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, source: Source, destination: Path | str) -> JobSnapshot:
        """Start extracting ``source`` into ``destination`` in the background.

        Returns immediately after the job enters Running.

        Args:
            source: Resolved source to read archives from
            destination: App-private asset directory

        Returns:
            Snapshot of the new Running job

        Raises:
            ExtractionInProgress: If a job is already running (it is left untouched)
            InvalidTransition: If the last job succeeded; a fresh supervisor is required
        """
        with self._lock:
            current = self.status
            if current is JobStatus.RUNNING:
                raise ExtractionInProgress("An extraction is already running")
            if not is_allowed_transition(current, JobStatus.RUNNING):
                raise InvalidTransition(
                    f"Cannot start a new extraction from state '{current.value}'"
                )

            self._generation += 1
            generation = self._generation
            job = ExtractionJob(
                source=source,
                destination=Path(destination),
                status=JobStatus.RUNNING,
                generation=generation,
            )
            self._job = job
            self._finished = threading.Event()
            self._stop_polling = threading.Event()
            stop_polling = self._stop_polling

            logger.info("Starting extraction from %s into %s", source.path, destination)
            snapshot = self._publish(job)

        source_path, target = source.path, str(job.destination)
        self._spawn(lambda: self._run_worker(generation, source_path, target), "extraction-worker")
        self._spawn(lambda: self._poll_loop(generation, stop_polling), "extraction-poller")
        return snapshot

    def retry(self) -> None:
        """Clear a failed job's error so a new source can be chosen.

        The previous source is not reused; the caller resolves a fresh one
        and calls ``start`` again.

        Raises:
            InvalidTransition: If the current job has not failed
        """
        with self._lock:
            if self._job is None or self._job.status is not JobStatus.FAILED:
                raise InvalidTransition(f"Cannot retry from state '{self.status.value}'")
            self._job.error = None
            logger.info("Extraction retry requested")

    def reset(self) -> None:
        """Discard a finished job so the next ``start`` begins from Idle.

        Raises:
            ExtractionInProgress: If the current job is still running
        """
        with self._lock:
            if self.status is JobStatus.RUNNING:
                raise ExtractionInProgress("An extraction is still running")
            self._job = None
            logger.info("Extraction job discarded")

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def poll(self) -> JobSnapshot | None:
        """Sample the engine once and publish the result.

        Returns:
            The published snapshot, or None if no job is running
        """
        with self._lock:
            job = self._job
            if job is None or job.status is not JobStatus.RUNNING:
                return None

            self._apply_progress(job, self.engine.current_progress(), self.engine.current_file_name())
            return self._publish(job)

    def report_progress(self, progress: float, current_file: str = "") -> None:
        """Record a progress value pushed by an engine callback.

        Applied with the same clamping and monotonicity as polled values and
        published on the next tick. Ignored once the job is terminal.
        """
        with self._lock:
            job = self._job
            if job is None or job.status is not JobStatus.RUNNING:
                logger.debug("Ignoring late progress report %.3f", progress)
                return
            self._apply_progress(job, progress, current_file)

    def _apply_progress(self, job: ExtractionJob, progress: float, current_file: str) -> None:
        job.progress = max(job.progress, clamp_progress(progress))
        job.current_file = current_file or ""

    def _poll_loop(self, generation: int, stop: threading.Event) -> None:
        while not stop.wait(self.poll_interval):
            with self._lock:
                if generation != self._generation:
                    return
                snapshot = self.poll()
            if snapshot is None or snapshot.progress >= 1.0:
                return

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _run_worker(self, generation: int, source_path: str, destination: str) -> None:
        message = ""
        try:
            succeeded = bool(self.engine.extract(source_path, destination))
        except Exception as e:
            logger.exception("Extraction engine raised")
            succeeded = False
            message = str(e) or e.__class__.__name__

        error: ExtractionError | None = None
        if not succeeded:
            error = self._classify_failure(message)

        self._finish(generation, error)

    def _classify_failure(self, message: str) -> ExtractionError:
        """Missing files win over a generic failure."""
        missing = [name for name in self.engine.missing_files() if name]
        if missing:
            return MissingFiles(tuple(missing))
        return GenericFailure(message or self.engine.last_error() or DEFAULT_FAILURE_MESSAGE)

    def _finish(self, generation: int, error: ExtractionError | None) -> None:
        with self._lock:
            job = self._job
            if job is None or job.generation != generation or job.status is not JobStatus.RUNNING:
                logger.debug("Discarding completion of stale job %d", generation)
                return

            if error is None:
                job.status = JobStatus.SUCCEEDED
                job.progress = 1.0
                logger.info("Extraction succeeded into %s", job.destination)
            else:
                job.status = JobStatus.FAILED
                job.error = error
                logger.warning("Extraction failed: %s", error)

            self._stop_polling.set()
            self._publish(job)
            self._finished.set()

    def _publish(self, job: ExtractionJob) -> JobSnapshot:
        # Caller holds self._lock.
        snapshot = job.snapshot()
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                logger.exception("Snapshot observer failed")
        return snapshot
