"""Type definitions for persisted onboarding documents.

This module defines TypedDict classes that mirror the JSON schemas shipped
in the package's schemas/ directory.
"""

from typing import TypedDict


class CompletionRecord(TypedDict, total=False):
    """Durable onboarding state. Both keys are optional on disk."""

    onboarding_complete: bool
    asset_path: str | None


class ManifestEntry(TypedDict):
    """One archive copied into the asset directory."""

    name: str  # Lowercased archive file name, e.g. 'd2data.mpq'
    size_bytes: int  # File size in bytes
    sha256: str  # Hex digest computed while copying


class AssetManifest(TypedDict):
    """Manifest written next to the extracted archives."""

    version: int  # Manifest format version
    source_path: str  # Where the archives were read from
    created_at: str  # ISO-8601 timestamp (UTC)
    assets: list[ManifestEntry]
