"""Exception hierarchy for the onboarding pipeline.

Resolution errors are raised while turning a user choice into a Source and
never create an extraction job. State errors signal misuse of the
supervisor or controller. Extraction outcomes themselves are values
(see ``core.job``), not exceptions.
"""


class OnboardingError(Exception):
    """Base class for every error raised by this package."""


class ResolutionError(OnboardingError):
    """A source could not be resolved from the user's choice."""

    code = "resolution_failed"


class NoSelection(ResolutionError):
    """The user aborted the picker or chose nothing usable."""

    code = "no_selection"


class NoDevicesFound(ResolutionError):
    """Device enumeration returned no removable storage."""

    code = "no_devices_found"


class ConnectionFailed(ResolutionError):
    """The network target was rejected locally or could not be reached."""

    code = "connection_failed"


class ExtractionStateError(OnboardingError):
    """An extraction operation was requested in the wrong job state."""


class ExtractionInProgress(ExtractionStateError):
    """``start`` was called while a job is still running."""


class InvalidTransition(ExtractionStateError):
    """The requested job transition is not part of the state machine."""


class InvalidStep(OnboardingError):
    """A wizard command was issued from a step that does not accept it."""


class ConfigurationError(OnboardingError):
    """A configuration value from the environment or command line is malformed."""


class ManifestValidationError(OnboardingError):
    """A JSON document failed schema validation.

    Attributes:
        path: Dotted location of the offending value ("root" for the document)
    """

    def __init__(self, message: str, path: str = "root"):
        super().__init__(message)
        self.path = path
