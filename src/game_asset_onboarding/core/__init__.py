"""Core utilities for asset onboarding.

This package contains archive checks, job and outcome types, the error
hierarchy, persisted document types and schema validation used across
all source kinds.
"""

from .archives import LEDGER_MARKERS, REQUIRED_ARCHIVES, has_required_files, inspect_archive
from .errors import (
    ConfigurationError,
    ConnectionFailed,
    ExtractionInProgress,
    ExtractionStateError,
    InvalidStep,
    InvalidTransition,
    ManifestValidationError,
    NoDevicesFound,
    NoSelection,
    OnboardingError,
    ResolutionError,
)
from .job import ExtractionError, GenericFailure, JobSnapshot, JobStatus, MissingFiles
from .types import AssetManifest, CompletionRecord, ManifestEntry
from .validator import validate_asset_manifest, validate_completion_record

__all__ = [
    "LEDGER_MARKERS",
    "REQUIRED_ARCHIVES",
    "has_required_files",
    "inspect_archive",
    "ConfigurationError",
    "ConnectionFailed",
    "ExtractionInProgress",
    "ExtractionStateError",
    "InvalidStep",
    "InvalidTransition",
    "ManifestValidationError",
    "NoDevicesFound",
    "NoSelection",
    "OnboardingError",
    "ResolutionError",
    "ExtractionError",
    "GenericFailure",
    "JobSnapshot",
    "JobStatus",
    "MissingFiles",
    "AssetManifest",
    "CompletionRecord",
    "ManifestEntry",
    "validate_asset_manifest",
    "validate_completion_record",
]
