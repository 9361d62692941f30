"""Game archive discovery and header checks.

This module knows which archives the engine needs, how to find them in a
directory regardless of filename case, and how to tell a genuine MPQ
archive from a placeholder.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path

ARCHIVE_EXTENSION = ".mpq"

# Archives a complete Lord of Destruction install provides.
REQUIRED_ARCHIVES: tuple[str, ...] = (
    "d2data.mpq",
    "d2exp.mpq",
    "d2sfx.mpq",
    "d2music.mpq",
    "d2speech.mpq",
    "d2char.mpq",
    "d2video.mpq",
)

# Entries an asset directory must hold for the ledger to trust it.
LEDGER_MARKERS: tuple[str, ...] = ("d2data", "d2exp")

MPQ_MAGIC = b"MPQ\x1a"
MPQ_USER_DATA_MAGIC = b"MPQ\x1b"
PLACEHOLDER_PATTERN = b"XXXX"

# Dangerous characters to remove from filenames
DANGEROUS_FILENAME_CHARS = r'[<>:"|?*\x00-\x1f]'


@dataclass(frozen=True)
class ArchiveCheck:
    """Result of inspecting one archive's header.

    Attributes:
        is_valid: True if the file starts with an MPQ header
        is_placeholder: True if the file is filled with 'X' characters
        error: Reason the file was rejected (empty when valid)
        size_bytes: Size of the file in bytes
    """

    is_valid: bool
    is_placeholder: bool = False
    error: str = ""
    size_bytes: int = 0


def sanitize_filename(filename: str) -> str:
    """Sanitize filename by removing dangerous characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename safe for storage
    """
    sanitized = re.sub(DANGEROUS_FILENAME_CHARS, "", filename)
    sanitized = sanitized.replace("/", "").replace("\\", "")
    return sanitized


def validate_path_safety(path: Path, base_dir: Path) -> None:
    """Validate that a path stays within the base directory.

    Args:
        path: Path to validate
        base_dir: Base directory that path must be within

    Raises:
        ValueError: If path escapes the base directory
    """
    resolved_path = path.resolve()
    resolved_base = base_dir.resolve()

    if not resolved_path.is_relative_to(resolved_base):
        raise ValueError(f"Path {path} escapes base directory {base_dir}")


def find_archives(directory: Path) -> dict[str, Path]:
    """Map lowercased archive names to their paths in ``directory``.

    Only the top level is searched; hidden files are skipped.

    Args:
        directory: Directory holding the game archives

    Returns:
        Dictionary of lowercased file name -> actual path
    """
    archives: dict[str, Path] = {}
    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if not entry.is_file():
                continue
            name = entry.name.lower()
            if name.endswith(ARCHIVE_EXTENSION):
                archives[name] = Path(entry.path)
    return archives


def inspect_archive(path: Path) -> ArchiveCheck:
    """Check an archive's magic bytes.

    Args:
        path: Archive to inspect

    Returns:
        ArchiveCheck describing the header
    """
    try:
        size = path.stat().st_size
        with path.open("rb") as f:
            header = f.read(4)
    except OSError as e:
        return ArchiveCheck(is_valid=False, error=f"Failed to open file: {e}")

    if len(header) < 4:
        return ArchiveCheck(is_valid=False, error="Failed to read file header", size_bytes=size)

    if header == PLACEHOLDER_PATTERN:
        return ArchiveCheck(
            is_valid=False,
            is_placeholder=True,
            error="File is a placeholder (filled with 'X' characters)",
            size_bytes=size,
        )

    if header in (MPQ_MAGIC, MPQ_USER_DATA_MAGIC):
        return ArchiveCheck(is_valid=True, size_bytes=size)

    return ArchiveCheck(is_valid=False, error="Invalid MPQ header", size_bytes=size)


def has_required_files(directory: Path, markers: tuple[str, ...] = LEDGER_MARKERS) -> bool:
    """Check that an asset directory holds every marker entry.

    A marker matches an entry named exactly like it or with the archive
    extension appended, compared case-insensitively.

    Args:
        directory: Asset directory to check
        markers: Required entry names without extension

    Returns:
        True if the directory exists and every marker is present
    """
    if not directory.is_dir():
        return False

    try:
        names = {entry.name.lower() for entry in os.scandir(directory)}
    except OSError:
        return False

    return all(
        marker.lower() in names or f"{marker.lower()}{ARCHIVE_EXTENSION}" in names
        for marker in markers
    )
