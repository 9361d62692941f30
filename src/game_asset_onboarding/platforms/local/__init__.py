"""Local storage platform for source resolution.

This platform lets the user browse local or external storage and pick
an archive; the directory holding it becomes the extraction source.
"""

from pathlib import Path

from .browser import BrowserEntry, FileBrowser, default_browse_root
from .resolver import LocalResolver

# Auto-register with the registry
from ...core.archives import ARCHIVE_EXTENSION
from ...registry import ResolverRegistry


def _create_local_resolver(
    engine: object = None,
    file_filter: str = ARCHIVE_EXTENSION,
    browse_root: Path | None = None,
    private_dir: Path | None = None,
    **kwargs: object,
) -> LocalResolver:
    """Factory function for creating local resolvers.

    Args:
        engine: Unused; local resolution needs no engine primitives
        file_filter: Extension a selected file must have
        browse_root: Directory the browser starts in
        private_dir: Fallback start directory
        **kwargs: Options meant for other source kinds (ignored)

    Returns:
        LocalResolver instance
    """
    return LocalResolver(file_filter=file_filter, browse_root=browse_root, private_dir=private_dir)


# Auto-register at module import
ResolverRegistry.register_factory("local", _create_local_resolver)

__all__ = [
    "BrowserEntry",
    "FileBrowser",
    "LocalResolver",
    "default_browse_root",
]
