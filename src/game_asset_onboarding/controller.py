"""Onboarding wizard controller.

Drives the linear flow welcome -> choose source -> extracting -> complete,
with failures going to an error step that loops back to source selection
on retry. It is the only component with user-observable side effects;
presentation code issues commands and renders the state it exposes.
"""

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from .core.errors import InvalidStep, NoDevicesFound, OnboardingError, ResolutionError
from .core.job import ExtractionError, GenericFailure, JobSnapshot, JobStatus, MissingFiles
from .engine.base import NetworkProtocol
from .help import HelpTopic, get_topic, topic_for_error
from .ledger import CompletionLedger
from .resolver import SourceResolver
from .sources.base import SourceKind, UsbDevice
from .supervisor import ExtractionSupervisor

logger = logging.getLogger(__name__)

Listener = Callable[["OnboardingController"], None]


class WizardStep(str, Enum):
    WELCOME = "welcome"
    CHOOSE_SOURCE = "choose_source"
    EXTRACTING = "extracting"
    ERROR = "error"
    COMPLETE = "complete"


class OnboardingController:
    """Orchestrate source resolution, extraction and completion.

    Commands raise ``InvalidStep`` when issued from a step that does not
    accept them. Failures are never retried automatically; the user has to
    call ``retry``.

    Example:
        >>> controller = OnboardingController(ledger, resolver, supervisor, Path('/data/assets'))
        >>> controller.confirm_welcome()
        >>> controller.choose_source('local', selection='/sdcard/d2/d2data.mpq')
        >>> controller.step
        <WizardStep.EXTRACTING: 'extracting'>
    """

    def __init__(
        self,
        ledger: CompletionLedger,
        resolver: SourceResolver,
        supervisor: ExtractionSupervisor,
        destination: Path | str,
        on_complete: Callable[[Path], None] | None = None,
    ):
        """Initialize the controller.

        Args:
            ledger: Completion ledger written on success
            resolver: Turns user choices into Sources
            supervisor: Runs the extraction
            destination: App-private asset directory
            on_complete: Host hook called once when onboarding finishes
        """
        self.ledger = ledger
        self.resolver = resolver
        self.supervisor = supervisor
        self.destination = Path(destination)
        self.on_complete = on_complete

        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self.progress = 0.0
        self.current_file = ""
        self.error: ExtractionError | None = None
        self.resolution_error: ResolutionError | None = None

        if ledger.is_first_run():
            self.step = WizardStep.WELCOME
        else:
            logger.info("Onboarding already complete; nothing to do")
            self.step = WizardStep.COMPLETE

        supervisor.subscribe(self._on_snapshot)

    @property
    def is_complete(self) -> bool:
        return self.step is WizardStep.COMPLETE

    def add_listener(self, listener: Listener) -> None:
        """Call ``listener(controller)`` after every state change."""
        with self._lock:
            self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def confirm_welcome(self) -> None:
        with self._lock:
            self._require(WizardStep.WELCOME)
            self._set_step(WizardStep.CHOOSE_SOURCE)

    def choose_source(self, kind: SourceKind | str, **params: Any) -> bool:
        """Resolve the chosen source and start extracting it.

        Args:
            kind: 'local', 'usb' or 'network'
            **params: Kind-specific selection (see SourceResolver)

        Returns:
            True if extraction started; False if resolution failed, in which
            case ``resolution_error`` holds the reason
        """
        with self._lock:
            self._require(WizardStep.CHOOSE_SOURCE)
            self.resolution_error = None

            try:
                source = self.resolver.resolve(kind, **params)
            except ResolutionError as e:
                logger.info("Source resolution failed: %s", e)
                self.resolution_error = e
                self._notify()
                return False

            self.progress = 0.0
            self.current_file = ""
            self.error = None

        # Supervisor events take the supervisor lock before ours; never call
        # into it while holding ours.
        self.supervisor.start(source, self.destination)
        return True

    def confirm_network_credentials(
        self,
        protocol: NetworkProtocol | str,
        host: str,
        share: str,
        username: str = "",
        password: str = "",
    ) -> bool:
        return self.choose_source(
            SourceKind.NETWORK,
            protocol=protocol,
            host=host,
            share=share,
            username=username,
            password=password,
        )

    def usb_devices(self) -> list[UsbDevice]:
        """Devices to present for USB selection ([] if none were found)."""
        with self._lock:
            self._require(WizardStep.CHOOSE_SOURCE)
            try:
                return self.resolver.list_usb_devices()
            except NoDevicesFound as e:
                self.resolution_error = e
                self._notify()
                return []

    def retry(self) -> None:
        """Leave the error step and return to source selection."""
        with self._lock:
            self._require(WizardStep.ERROR)
        if self.supervisor.status is JobStatus.FAILED:
            self.supervisor.retry()
        else:
            # The copy succeeded but the ledger write did not.
            self.supervisor.reset()
        with self._lock:
            self.error = None
            self.resolution_error = None
            self.progress = 0.0
            self.current_file = ""
            self._set_step(WizardStep.CHOOSE_SOURCE)

    def open_help(self, topic_id: str | None = None) -> HelpTopic:
        """Static guidance; picks a topic for the current error by default."""
        if topic_id is not None:
            return get_topic(topic_id)
        return topic_for_error(self.error or self.resolution_error)

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    def error_lines(self) -> list[str]:
        """Render the current extraction error for display."""
        error = self.error
        if isinstance(error, MissingFiles):
            return ["The following required files are missing:"] + [
                f"  - {name}" for name in error.names
            ]
        if isinstance(error, GenericFailure):
            return [error.message]
        return []

    # ------------------------------------------------------------------
    # Supervisor events
    # ------------------------------------------------------------------

    def _on_snapshot(self, snapshot: JobSnapshot) -> None:
        with self._lock:
            if self.step is WizardStep.COMPLETE:
                return

            if snapshot.status is JobStatus.RUNNING:
                self.progress = snapshot.progress
                self.current_file = snapshot.current_file
                if self.step is not WizardStep.EXTRACTING:
                    self._set_step(WizardStep.EXTRACTING)
                else:
                    self._notify()
                return

            if snapshot.status is JobStatus.SUCCEEDED:
                try:
                    self.ledger.mark_complete(self.destination)
                except (OSError, OnboardingError) as e:
                    logger.error("Could not record onboarding completion: %s", e)
                    self.error = GenericFailure(f"Could not record completion: {e}")
                    self._set_step(WizardStep.ERROR)
                    return
                self.progress = 1.0
                self.current_file = ""
                self._set_step(WizardStep.COMPLETE)
                if self.on_complete is not None:
                    self.on_complete(self.destination)
                return

            if snapshot.status is JobStatus.FAILED:
                self.error = snapshot.error
                self._set_step(WizardStep.ERROR)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, step: WizardStep) -> None:
        if self.step is not step:
            raise InvalidStep(f"Command not available in step '{self.step.value}'")

    def _set_step(self, step: WizardStep) -> None:
        logger.debug("Wizard step %s -> %s", self.step.value, step.value)
        self.step = step
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
