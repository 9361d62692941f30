"""Filesystem extraction engine.

This module provides an ExtractionEngine that copies the game archives
from a local directory, mounted USB device or mapped network share into
the application's asset directory, recording a checksum manifest as it
goes. Archive contents are not decoded here; the game runtime reads the
MPQ files directly.
"""

import hashlib
import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path, PureWindowsPath
from typing import Callable, Mapping

from ..core.archives import (
    REQUIRED_ARCHIVES,
    find_archives,
    inspect_archive,
    sanitize_filename,
    validate_path_safety,
)
from ..core.errors import ManifestValidationError
from ..core.types import AssetManifest, ManifestEntry
from ..core.validator import validate_asset_manifest
from .base import ExtractionEngine, NetworkProtocol
from .devices import REMOVABLE_MOUNT_ROOTS, enumerate_removable_storage, probe_network

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"
MANIFEST_VERSION = 1
DEFAULT_CHUNK_SIZE = 1024 * 1024

ProgressCallback = Callable[[float, str], None]


class FilesystemExtractionEngine(ExtractionEngine):
    """Copy and verify game archives from a directory.

    Progress is tracked in bytes across all archives and can be read from
    any thread while ``extract`` runs. An optional ``progress_callback`` is
    also pushed ``(progress, file_name)`` after every chunk.

    Example:
        >>> engine = FilesystemExtractionEngine()
        >>> engine.extract('/media/usb/Diablo II', '/home/me/.local/share/game/assets')
        True
    """

    def __init__(
        self,
        required_archives: tuple[str, ...] = REQUIRED_ARCHIVES,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        network_mounts: Mapping[str, Path] | None = None,
        removable_roots: tuple[str, ...] = REMOVABLE_MOUNT_ROOTS,
        network_timeout: float = 5.0,
        progress_callback: ProgressCallback | None = None,
    ):
        """Initialize the engine.

        Args:
            required_archives: Archive names that must be present in a source
            chunk_size: Bytes copied between progress updates
            network_mounts: Maps ``\\\\host\\share`` prefixes to local mount points
            removable_roots: Directories under which removable media is mounted
            network_timeout: Seconds to wait when probing network sources
            progress_callback: Optional push channel for progress updates
        """
        self.required_archives = required_archives
        self.chunk_size = chunk_size
        self.network_mounts = {
            _normalize_unc(prefix): Path(mount) for prefix, mount in (network_mounts or {}).items()
        }
        self.removable_roots = removable_roots
        self.network_timeout = network_timeout
        self.progress_callback = progress_callback

        self._lock = threading.Lock()
        self._progress = 0.0
        self._current_file = ""
        self._missing: list[str] = []
        self._last_error = ""

    # ------------------------------------------------------------------
    # Progress getters (safe to call from any thread)
    # ------------------------------------------------------------------

    def current_progress(self) -> float:
        with self._lock:
            return self._progress

    def current_file_name(self) -> str:
        with self._lock:
            return self._current_file

    def missing_files(self) -> list[str]:
        with self._lock:
            return list(self._missing)

    def last_error(self) -> str:
        with self._lock:
            return self._last_error

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, source_path: str, destination_path: str) -> bool:
        self._reset()

        source = self.local_path(source_path)
        if source is None:
            return self._fail(f"No local mount configured for network share {source_path}")
        if not source.is_dir():
            return self._fail(f"Source is not a directory: {source_path}")

        try:
            archives = find_archives(source)
        except OSError as e:
            return self._fail(f"Cannot read source directory {source}: {e}")

        missing = self._find_missing(archives)
        if missing:
            with self._lock:
                self._missing = missing
            return self._fail(f"Missing required archives: {', '.join(missing)}")

        # Required archives are valid at this point; a damaged extra archive
        # such as a stray patch is left behind rather than failing the job.
        for name, path in sorted(archives.items()):
            check = inspect_archive(path)
            if not check.is_valid:
                logger.warning("Skipping %s: %s", path.name, check.error)
                del archives[name]

        destination = Path(destination_path)
        total_bytes = sum(path.stat().st_size for path in archives.values()) or 1
        copied = 0
        entries: list[ManifestEntry] = []

        try:
            destination.mkdir(parents=True, exist_ok=True)
            for name, path in sorted(archives.items()):
                target = destination / sanitize_filename(name)
                validate_path_safety(target, destination)
                logger.info("Copying %s -> %s", path, target)
                digest, size = self._copy_file(path, target, copied, total_bytes)
                copied += size
                entries.append(ManifestEntry(name=target.name, size_bytes=size, sha256=digest))

            self._write_manifest(destination, str(source_path), entries)
        except (OSError, ValueError, ManifestValidationError) as e:
            logger.error("Extraction into %s failed: %s", destination, e)
            return self._fail(str(e))

        self._update(1.0, "")
        logger.info("Extracted %d archives into %s", len(entries), destination)
        return True

    def validate(self, path: str) -> bool:
        source = self.local_path(path)
        if source is None or not source.is_dir():
            return False
        try:
            archives = find_archives(source)
        except OSError:
            return False
        return not self._find_missing(archives)

    def local_path(self, path: str) -> Path | None:
        """Translate a source path into a locally readable directory.

        UNC paths are looked up in ``network_mounts``; unmapped UNC paths
        are only usable where the OS can open them natively (Windows).

        Returns:
            Local path, or None if a network share has no local mapping
        """
        if not (path.startswith("\\\\") or path.startswith("//")):
            return Path(path)

        unc = "\\\\" + path.replace("/", "\\").strip("\\")
        normalized = unc.lower()
        for prefix, mount in self.network_mounts.items():
            if normalized == prefix or normalized.startswith(prefix + "\\"):
                # Host and share compare case-insensitively; the rest keeps its case.
                remainder = PureWindowsPath(unc[len(prefix):].lstrip("\\"))
                return mount.joinpath(*remainder.parts)

        if os.name == "nt":
            return Path(path)
        return None

    # ------------------------------------------------------------------
    # Discovery primitives
    # ------------------------------------------------------------------

    def list_usb_devices(self) -> list[str]:
        return enumerate_removable_storage(self.removable_roots)

    def connect_network(
        self,
        protocol: NetworkProtocol,
        host: str,
        share: str,
        username: str,
        password: str,
    ) -> bool:
        return probe_network(
            NetworkProtocol.parse(protocol),
            host,
            share,
            username,
            password,
            timeout=self.network_timeout,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        with self._lock:
            self._progress = 0.0
            self._current_file = ""
            self._missing = []
            self._last_error = ""

    def _fail(self, message: str) -> bool:
        logger.warning("Extraction failed: %s", message)
        with self._lock:
            self._last_error = message
            self._current_file = ""
        return False

    def _update(self, progress: float, current_file: str) -> None:
        with self._lock:
            self._progress = progress
            self._current_file = current_file
        if self.progress_callback is not None:
            self.progress_callback(progress, current_file)

    def _find_missing(self, archives: dict[str, Path]) -> list[str]:
        missing = []
        for name in self.required_archives:
            path = archives.get(name.lower())
            if path is None:
                missing.append(name)
                continue
            check = inspect_archive(path)
            if not check.is_valid:
                logger.info("Required archive %s is unusable: %s", path.name, check.error)
                missing.append(name)
        return missing

    def _copy_file(self, source: Path, target: Path, copied: int, total: int) -> tuple[str, int]:
        """Copy one archive in chunks, updating progress and hashing as it goes.

        Returns:
            Tuple of (sha256 hex digest, bytes copied)
        """
        digest = hashlib.sha256()
        size = 0
        self._update(copied / total, target.name)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with source.open("rb") as src, os.fdopen(fd, "wb") as dst:
                while True:
                    chunk = src.read(self.chunk_size)
                    if not chunk:
                        break
                    dst.write(chunk)
                    digest.update(chunk)
                    size += len(chunk)
                    self._update(min((copied + size) / total, 1.0), target.name)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        return digest.hexdigest(), size

    def _write_manifest(
        self, destination: Path, source_path: str, entries: list[ManifestEntry]
    ) -> None:
        manifest: AssetManifest = {
            "version": MANIFEST_VERSION,
            "source_path": source_path,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "assets": entries,
        }
        validate_asset_manifest(manifest)
        (destination / MANIFEST_FILENAME).write_text(
            json.dumps(manifest, indent=2) + "\n", encoding="utf-8"
        )


def _normalize_unc(path: str) -> str:
    return "\\\\" + path.replace("/", "\\").strip("\\").lower()
