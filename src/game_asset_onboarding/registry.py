"""Resolver registry for factory-based source resolution.

This module provides a central registry for resolver factories,
keeping the SourceResolver facade kind-agnostic and enabling automatic
platform discovery.
"""

import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from .sources.base import SourceKind

if TYPE_CHECKING:
    from .engine.base import ExtractionEngine
    from .sources.base import Resolver

logger = logging.getLogger(__name__)


class ResolverRegistry:
    """Central registry for resolver factories.

    Each platform sub-package registers a factory for its source kind when
    imported, and the registry can discover all available platforms.
    """

    _factories: dict[SourceKind, Callable[..., "Resolver"]] = {}

    @classmethod
    def register_factory(cls, kind: SourceKind | str, factory: Callable[..., "Resolver"]) -> None:
        """Register a factory function for creating resolvers.

        Args:
            kind: Source kind the factory handles (e.g., 'local', 'usb')
            factory: Callable taking ``engine`` and keyword options and
                returning a Resolver

        Example:
            >>> def create_local(engine, **options) -> LocalResolver:
            ...     return LocalResolver(**options)
            >>> ResolverRegistry.register_factory('local', create_local)
        """
        cls._factories[SourceKind(kind)] = factory

    @classmethod
    def create_resolver(
        cls, kind: SourceKind | str, engine: "ExtractionEngine", **options: Any
    ) -> "Resolver":
        """Create a resolver for a registered source kind.

        Args:
            kind: Name of the registered source kind
            engine: Engine providing the discovery primitives
            **options: Arguments passed to the resolver factory

        Returns:
            Resolver for the requested kind

        Raises:
            ValueError: If kind is not registered
        """
        try:
            key = SourceKind(kind)
        except ValueError:
            key = None

        if key is None or key not in cls._factories:
            available = ", ".join(k.value for k in cls._factories) or "none"
            raise ValueError(f"Unknown source kind: '{kind}'. Available kinds: {available}")

        return cls._factories[key](engine=engine, **options)

    @classmethod
    def list_kinds(cls) -> list[SourceKind]:
        """List all registered source kinds.

        Example:
            >>> ResolverRegistry.list_kinds()
            [<SourceKind.LOCAL: 'local'>, <SourceKind.NETWORK: 'network'>, <SourceKind.USB: 'usb'>]
        """
        return list(cls._factories.keys())

    @classmethod
    def discover_platforms(cls) -> None:
        """Auto-discover and import all platforms.

        Every sub-package of platforms/ is imported, which triggers its
        auto-registration. A platform that fails to import is logged and
        skipped.
        """
        platforms_dir = Path(__file__).parent / "platforms"

        if not platforms_dir.exists():
            return

        for platform_path in sorted(platforms_dir.iterdir()):
            if not platform_path.is_dir():
                continue

            if not (platform_path / "__init__.py").exists():
                continue

            platform_name = platform_path.name

            try:
                importlib.import_module(
                    f".platforms.{platform_name}", package="game_asset_onboarding"
                )
            except ImportError as e:
                logger.warning("Skipping source platform '%s': %s", platform_name, e)
