"""JSON Schema validation for persisted onboarding documents.

This module loads the formal JSON Schemas shipped with the package and
validates completion records and asset manifests before they are written
or after they are read back.
"""

import json
from functools import lru_cache
from importlib import resources
from typing import Any

import jsonschema
from jsonschema import ValidationError

from .errors import ManifestValidationError
from .types import AssetManifest, CompletionRecord

COMPLETION_RECORD_SCHEMA = "completion_record.schema.json"
ASSET_MANIFEST_SCHEMA = "asset_manifest.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema bundled in the package.

    Args:
        name: File name inside the package's schemas/ directory

    Returns:
        Dictionary containing the JSON Schema.

    Raises:
        FileNotFoundError: If the schema file doesn't exist
        json.JSONDecodeError: If the schema is invalid JSON
    """
    schema_file = resources.files("game_asset_onboarding").joinpath("schemas", name)
    if not schema_file.is_file():
        raise FileNotFoundError(f"Schema file not found: {name}")

    return json.loads(schema_file.read_text(encoding="utf-8"))  # type: ignore[no-any-return]


def _validate(document: Any, schema_name: str) -> None:
    try:
        jsonschema.validate(instance=document, schema=load_schema(schema_name))
    except ValidationError as e:
        error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
        raise ManifestValidationError(
            f"Validation error at {error_path}: {e.message}", path=error_path
        ) from e


def validate_completion_record(record: CompletionRecord | dict[str, Any]) -> None:
    """Validate a completion record against its schema.

    Raises:
        ManifestValidationError: If the record doesn't conform to the schema
    """
    _validate(record, COMPLETION_RECORD_SCHEMA)


def validate_asset_manifest(manifest: AssetManifest | dict[str, Any]) -> None:
    """Validate an asset manifest against its schema.

    Raises:
        ManifestValidationError: If the manifest doesn't conform to the schema
    """
    _validate(manifest, ASSET_MANIFEST_SCHEMA)


def validate_asset_manifest_with_error_details(
    manifest: AssetManifest | dict[str, Any],
) -> tuple[bool, str | None]:
    """Validate an asset manifest and return detailed error information.

    This is a convenience wrapper that catches validation errors and
    returns user-friendly error messages.

    Args:
        manifest: The manifest dictionary to validate

    Returns:
        Tuple of (is_valid, error_message). error_message is None if valid.
    """
    try:
        validate_asset_manifest(manifest)
        return True, None
    except ManifestValidationError as e:
        return False, str(e)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        return False, f"Schema error: {e}"
