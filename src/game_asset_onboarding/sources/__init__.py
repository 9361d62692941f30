"""Source resolvers for the onboarding pipeline.

This package contains the base classes and data types shared by all
resolvers. Kind-specific implementations live in the platforms/ directory.
"""

from .base import Credential, Resolver, Source, SourceKind, UsbDevice

__all__ = ["Credential", "Resolver", "Source", "SourceKind", "UsbDevice"]
