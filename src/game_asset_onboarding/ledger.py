"""Completion ledger for asset onboarding.

The ledger is the only state that survives across runs: whether onboarding
finished and where the extracted assets live. It is an explicit object
built once at startup around a ``LedgerStore``, so tests can swap in
``MemoryStore`` for the on-disk ``JsonFileStore``.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable

from .core.archives import LEDGER_MARKERS, has_required_files
from .core.errors import ManifestValidationError
from .core.types import CompletionRecord
from .core.validator import validate_completion_record

logger = logging.getLogger(__name__)

KEY_ONBOARDING_COMPLETE = "onboarding_complete"
KEY_ASSET_PATH = "asset_path"


class LedgerStore(ABC):
    """Durable key/value namespace backing the ledger."""

    @abstractmethod
    def load(self) -> CompletionRecord:
        """Return the stored record, or an empty one if nothing is stored."""
        pass

    @abstractmethod
    def save(self, record: CompletionRecord) -> None:
        """Persist the full record."""
        pass


class MemoryStore(LedgerStore):
    """In-memory store for tests and embedding."""

    def __init__(self, initial: CompletionRecord | None = None):
        self._record: dict[str, Any] = dict(initial or {})

    def load(self) -> CompletionRecord:
        return dict(self._record)  # type: ignore[return-value]

    def save(self, record: CompletionRecord) -> None:
        self._record = dict(record)


class JsonFileStore(LedgerStore):
    """Store the record as a single JSON document on disk.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a crash never leaves a half-written file.
    A corrupt or schema-invalid file loads as an empty record, which makes
    onboarding run again rather than blocking startup.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> CompletionRecord:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            validate_completion_record(data)
        except (OSError, json.JSONDecodeError, ManifestValidationError) as e:
            logger.warning("Ignoring unreadable onboarding ledger %s: %s", self.path, e)
            return {}

        return data  # type: ignore[no-any-return]

    def save(self, record: CompletionRecord) -> None:
        validate_completion_record(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class CompletionLedger:
    """Durable record of onboarding completion and asset location.

    Example:
        >>> ledger = CompletionLedger(MemoryStore())
        >>> ledger.is_first_run()
        True
        >>> ledger.mark_complete("/data/assets")
    """

    def __init__(
        self,
        store: LedgerStore,
        required_files: tuple[str, ...] = LEDGER_MARKERS,
        asset_check: Callable[[Path], bool] | None = None,
    ):
        """Initialize the ledger.

        Args:
            store: Backing store for the record
            required_files: Marker entries the asset directory must contain
            asset_check: Replaces the marker check on the stored asset path
        """
        self.store = store
        self.required_files = required_files
        self._asset_check = asset_check or (
            lambda path: has_required_files(path, self.required_files)
        )

    def is_first_run(self) -> bool:
        """True unless onboarding completed and the assets are still in place.

        An asset directory that was deleted or emptied externally makes this
        true again, so onboarding heals itself.
        """
        record = self.store.load()
        if not record.get(KEY_ONBOARDING_COMPLETE, False):
            return True
        if not self.has_valid_assets():
            logger.info("Onboarding was complete but assets are missing; re-onboarding")
            return True
        return False

    def mark_complete(self, asset_path: str | os.PathLike[str]) -> None:
        """Record a successful extraction. Last writer wins."""
        path = str(Path(asset_path).absolute())
        record: CompletionRecord = {"onboarding_complete": True, "asset_path": path}
        self.store.save(record)
        logger.info("Onboarding marked complete (asset_path=%s)", path)

    def get_asset_path(self) -> str | None:
        return self.store.load().get(KEY_ASSET_PATH)

    def has_valid_assets(self) -> bool:
        """Check the stored asset directory for the required files."""
        asset_path = self.get_asset_path()
        if not asset_path:
            return False
        return self._asset_check(Path(asset_path))
