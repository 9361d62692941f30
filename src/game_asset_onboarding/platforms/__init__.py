"""Source platforms for the onboarding pipeline.

Each sub-package implements one source kind (local, usb, network) and
registers its resolver factory with ResolverRegistry when imported.
"""

# Platform modules are imported dynamically by ResolverRegistry.discover_platforms()
