"""Source resolution facade.

This module provides the single entry point the onboarding flow uses to
turn a user's choice into a Source. It is kind-agnostic and delegates to
the resolvers registered in ResolverRegistry.
"""

from pathlib import Path
from typing import Any

from .core.archives import ARCHIVE_EXTENSION
from .engine.base import ExtractionEngine, NetworkProtocol
from .platforms.local import FileBrowser, LocalResolver
from .platforms.usb import UsbResolver
from .platforms.usb.resolver import DeviceChooser
from .registry import ResolverRegistry
from .sources.base import Resolver, Source, SourceKind, UsbDevice


class SourceResolver:
    """Resolve local, USB and network choices into Sources.

    Example:
        >>> resolver = SourceResolver(FilesystemExtractionEngine())
        >>> source = resolver.resolve_local(Path('/media/usb/d2/d2data.mpq'))
        >>> source.path
        '/media/usb/d2'
        >>> source = resolver.resolve('network', protocol='SMB', host='nas', share='games')
        >>> source.kind
        <SourceKind.NETWORK: 'network'>
    """

    def __init__(
        self,
        engine: ExtractionEngine,
        file_filter: str = ARCHIVE_EXTENSION,
        browse_root: Path | None = None,
        private_dir: Path | None = None,
    ):
        """Initialize the resolver.

        Args:
            engine: Engine providing device enumeration and network connect
            file_filter: Extension local selections must have
            browse_root: Directory the local browser starts in
            private_dir: App-private directory, the browser's last fallback
        """
        self.engine = engine
        self.options: dict[str, Any] = {
            "file_filter": file_filter,
            "browse_root": browse_root,
            "private_dir": private_dir,
        }

    def resolver_for(self, kind: SourceKind | str) -> Resolver:
        """Create the registered resolver for ``kind``.

        Raises:
            ValueError: If kind is not registered
        """
        return ResolverRegistry.create_resolver(kind, engine=self.engine, **self.options)

    def resolve(self, kind: SourceKind | str, **params: Any) -> Source:
        """Resolve a choice of any kind.

        Args:
            kind: Source kind the user chose
            **params: Kind-specific selection parameters

        Raises:
            ResolutionError: If the choice cannot be resolved
            ValueError: If kind is not registered
        """
        return self.resolver_for(kind).resolve(**params)

    def browser(self) -> FileBrowser:
        """Create a file browser for picking a local archive."""
        resolver = self.resolver_for(SourceKind.LOCAL)
        if not isinstance(resolver, LocalResolver):
            raise TypeError(f"Local resolver {type(resolver).__name__} has no file browser")
        return resolver.browser()

    def resolve_local(self, selection: Path | str | None) -> Source:
        return self.resolve(SourceKind.LOCAL, selection=selection)

    def list_usb_devices(self) -> list[UsbDevice]:
        """Enumerate removable devices.

        Raises:
            NoDevicesFound: If none are available
        """
        resolver = self.resolver_for(SourceKind.USB)
        if not isinstance(resolver, UsbResolver):
            raise TypeError(f"USB resolver {type(resolver).__name__} cannot list devices")
        return resolver.list_devices()

    def resolve_usb(
        self,
        device: UsbDevice | str | None = None,
        chooser: DeviceChooser | None = None,
    ) -> Source:
        return self.resolve(SourceKind.USB, device=device, chooser=chooser)

    def resolve_network(
        self,
        protocol: NetworkProtocol | str,
        host: str,
        share: str,
        username: str = "",
        password: str = "",
    ) -> Source:
        return self.resolve(
            SourceKind.NETWORK,
            protocol=protocol,
            host=host,
            share=share,
            username=username,
            password=password,
        )
