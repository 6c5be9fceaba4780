"""Platform implementations for the conversion pipeline.

This package contains self-contained platform modules that provide the
deserializer, resolver and transpiler for one source script format.

Each platform module auto-registers itself with the PlatformRegistry
when imported.
"""

# Platform modules are imported dynamically by PlatformRegistry.discover_platforms()
# to handle missing dependencies gracefully
