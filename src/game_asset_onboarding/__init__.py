"""Game Asset Onboarding.

This package runs the first-launch flow that locates the user's own copy
of the game data archives (on this device, on USB storage or on a network
share), copies them into the application's asset directory in the
background, and records completion so later launches skip straight to
the game.
"""

# Core library interface
from .controller import OnboardingController, WizardStep
from .ledger import CompletionLedger, JsonFileStore, MemoryStore
from .registry import ResolverRegistry
from .resolver import SourceResolver
from .sources.base import Credential, Resolver, Source, SourceKind, UsbDevice
from .supervisor import ExtractionSupervisor

# Engines
from .engine import ExtractionEngine, FilesystemExtractionEngine, NetworkProtocol

# Core utilities
from .core import (
    ExtractionError,
    GenericFailure,
    JobSnapshot,
    JobStatus,
    MissingFiles,
    OnboardingError,
    ResolutionError,
    validate_asset_manifest,
    validate_completion_record,
)
from .config import OnboardingConfig

__version__ = "0.1.0"

# Auto-discover and register all source platforms
ResolverRegistry.discover_platforms()

__all__ = [
    # Primary library interface
    "OnboardingController",
    "WizardStep",
    "CompletionLedger",
    "JsonFileStore",
    "MemoryStore",
    "ResolverRegistry",
    "SourceResolver",
    "ExtractionSupervisor",
    "Credential",
    "Resolver",
    "Source",
    "SourceKind",
    "UsbDevice",
    "OnboardingConfig",
    # Engines
    "ExtractionEngine",
    "FilesystemExtractionEngine",
    "NetworkProtocol",
    # Core utilities
    "ExtractionError",
    "GenericFailure",
    "JobSnapshot",
    "JobStatus",
    "MissingFiles",
    "OnboardingError",
    "ResolutionError",
    "validate_asset_manifest",
    "validate_completion_record",
]
