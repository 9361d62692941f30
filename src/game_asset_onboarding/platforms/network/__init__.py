"""Network share platform for source resolution.

This platform connects to SMB, FTP or HTTP locations through the
extraction engine and resolves them into UNC-style Sources.
"""

from ...engine.base import ExtractionEngine
from .resolver import NetworkResolver, build_unc_path

# Auto-register with the registry
from ...registry import ResolverRegistry


def _create_network_resolver(engine: ExtractionEngine, **kwargs: object) -> NetworkResolver:
    """Factory function for creating network resolvers.

    Args:
        engine: Engine providing the connect primitive
        **kwargs: Options meant for other source kinds (ignored)

    Returns:
        NetworkResolver instance
    """
    return NetworkResolver(engine)


# Auto-register at module import
ResolverRegistry.register_factory("network", _create_network_resolver)

__all__ = ["NetworkResolver", "build_unc_path"]
