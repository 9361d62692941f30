"""Directory browser used to pick archives on local storage.

The browser is the logic behind a file picker: it tracks the current
directory, lists entries through an extension filter, navigates up and
down, and remembers the selected file. Presentation is left to the caller.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Shared external storage on Android-style devices.
EXTERNAL_STORAGE = Path("/storage/emulated/0")


@dataclass(frozen=True)
class BrowserEntry:
    name: str
    path: Path
    is_dir: bool


def default_browse_root(private_dir: Path | None = None) -> Path:
    """Pick the directory a new browser starts in.

    External storage is preferred, then the user's home directory, then
    the app-private directory.
    """
    candidates = [EXTERNAL_STORAGE, Path.home()]
    if private_dir is not None:
        candidates.append(Path(private_dir))

    for candidate in candidates:
        if candidate.is_dir():
            return candidate
    return Path(private_dir) if private_dir is not None else Path.cwd()


class FileBrowser:
    """Navigate directories and select a file matching an extension filter.

    Directories are always listed so navigation stays possible; files are
    listed only if they match ``file_filter`` (case-insensitive). An empty
    filter lists every file.

    Example:
        >>> browser = FileBrowser(Path('/media/usb'), file_filter='.mpq')
        >>> browser.enter('Diablo II')
        >>> browser.select('d2data.mpq')
        >>> browser.selection
        PosixPath('/media/usb/Diablo II/d2data.mpq')
    """

    def __init__(self, start: Path, file_filter: str = ""):
        self.current_directory = Path(start).absolute()
        self.file_filter = file_filter.lower()
        self.selection: Path | None = None

    def matches_filter(self, name: str) -> bool:
        return not self.file_filter or name.lower().endswith(self.file_filter)

    def entries(self) -> list[BrowserEntry]:
        """List the current directory, directories first, each group sorted by name."""
        dirs: list[BrowserEntry] = []
        files: list[BrowserEntry] = []

        try:
            with os.scandir(self.current_directory) as it:
                for entry in it:
                    try:
                        is_dir = entry.is_dir()
                    except OSError:
                        continue
                    if is_dir:
                        dirs.append(BrowserEntry(entry.name, Path(entry.path), True))
                    elif self.matches_filter(entry.name):
                        files.append(BrowserEntry(entry.name, Path(entry.path), False))
        except OSError as e:
            logger.warning("Cannot list %s: %s", self.current_directory, e)
            return []

        dirs.sort(key=lambda e: e.name.lower())
        files.sort(key=lambda e: e.name.lower())
        return dirs + files

    def enter(self, name: str) -> None:
        """Descend into a subdirectory of the current directory.

        Raises:
            NotADirectoryError: If ``name`` is not a directory here
        """
        target = self.current_directory / name
        if not target.is_dir():
            raise NotADirectoryError(f"Not a directory: {target}")
        self.current_directory = target
        self.selection = None

    def up(self) -> bool:
        """Ascend to the parent directory if it exists and is readable.

        Returns:
            True if the current directory changed
        """
        parent = self.current_directory.parent
        if parent == self.current_directory or not os.access(parent, os.R_OK):
            return False
        self.current_directory = parent
        self.selection = None
        return True

    def select(self, name: str) -> Path:
        """Select a file in the current directory.

        Raises:
            FileNotFoundError: If ``name`` is not a file here
            ValueError: If the file does not match the filter
        """
        target = self.current_directory / name
        if not target.is_file():
            raise FileNotFoundError(f"No such file: {target}")
        if not self.matches_filter(name):
            raise ValueError(f"{name} does not match filter '{self.file_filter}'")
        self.selection = target
        return target
