"""Local filesystem resolver.

Turns the file (or directory) a user picked in a ``FileBrowser`` into a
local Source pointing at the directory that holds the archives.
"""

from pathlib import Path

from ...core.archives import ARCHIVE_EXTENSION
from ...core.errors import NoSelection
from ...sources.base import Resolver, Source, SourceKind
from .browser import FileBrowser, default_browse_root


class LocalResolver(Resolver):
    """Resolver for archives on local or external storage."""

    kind = SourceKind.LOCAL

    def __init__(
        self,
        file_filter: str = ARCHIVE_EXTENSION,
        browse_root: Path | None = None,
        private_dir: Path | None = None,
    ):
        """Initialize the resolver.

        Args:
            file_filter: Extension a selected file must have ("" for any)
            browse_root: Directory new browsers start in
            private_dir: App-private directory used when nothing else exists
        """
        self.file_filter = file_filter
        self.browse_root = browse_root
        self.private_dir = private_dir

    def browser(self) -> FileBrowser:
        """Create a browser rooted at the configured or default start directory."""
        start = self.browse_root or default_browse_root(self.private_dir)
        return FileBrowser(start, self.file_filter)

    def resolve(self, selection: Path | str | None = None, **params: object) -> Source:
        """Resolve a picked path into a local Source.

        A file resolves to its containing directory; a directory resolves
        to itself.

        Args:
            selection: Path the user picked, or None if they aborted

        Returns:
            Source with kind=local

        Raises:
            NoSelection: If nothing usable was picked
        """
        if selection is None or str(selection) == "":
            raise NoSelection("No file was selected")

        path = Path(selection).expanduser().absolute()

        if path.is_dir():
            return Source(kind=SourceKind.LOCAL, path=str(path))

        if not path.is_file():
            raise NoSelection(f"Selected path does not exist: {path}")

        if self.file_filter and not path.name.lower().endswith(self.file_filter.lower()):
            raise NoSelection(f"Selected file is not a {self.file_filter} archive: {path.name}")

        return Source(kind=SourceKind.LOCAL, path=str(path.parent))
