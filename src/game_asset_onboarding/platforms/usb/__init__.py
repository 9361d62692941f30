"""USB storage platform for source resolution.

This platform enumerates removable devices through the extraction
engine and resolves the chosen one into a Source.
"""

from ...engine.base import ExtractionEngine
from .resolver import UsbResolver, parse_device_record, parse_device_records

# Auto-register with the registry
from ...registry import ResolverRegistry


def _create_usb_resolver(engine: ExtractionEngine, **kwargs: object) -> UsbResolver:
    """Factory function for creating USB resolvers.

    Args:
        engine: Engine providing device enumeration
        **kwargs: Options meant for other source kinds (ignored)

    Returns:
        UsbResolver instance
    """
    return UsbResolver(engine)


# Auto-register at module import
ResolverRegistry.register_factory("usb", _create_usb_resolver)

__all__ = ["UsbResolver", "parse_device_record", "parse_device_records"]
